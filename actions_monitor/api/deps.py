"""Dependencies shared by the API routers."""

from contextlib import contextmanager
from typing import Callable, ContextManager, Iterator

from actions_monitor.config import settings
from actions_monitor.github_client import GitHubClient
from actions_monitor.services.actions_metrics import WorkflowMetricsAggregator

AggregatorFactory = Callable[[], ContextManager[WorkflowMetricsAggregator]]


@contextmanager
def open_metrics_aggregator() -> Iterator[WorkflowMetricsAggregator]:
    """Aggregator bound to a fresh client built from settings; closed on exit."""
    with GitHubClient.from_settings(settings) as client:
        yield WorkflowMetricsAggregator.from_settings(client, settings)


def get_aggregator_factory() -> AggregatorFactory:
    # Client construction is deferred so configuration errors surface
    # inside the handler's error mapping.
    return open_metrics_aggregator
