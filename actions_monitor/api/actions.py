"""GitHub Actions monitor endpoints."""

import logging
from typing import Callable, TypeVar

import httpx
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from actions_monitor.api.deps import AggregatorFactory, get_aggregator_factory
from actions_monitor.dtos import (
    ActionsOverviewResponse,
    ErrorResponse,
    MetricsResponse,
    WorkflowListResponse,
)
from actions_monitor.github_exceptions import GithubError
from actions_monitor.services.actions_metrics import WorkflowMetricsAggregator

logger = logging.getLogger(__name__)

router = APIRouter()

T = TypeVar("T")

UPSTREAM_ERRORS = (
    GithubError,
    httpx.HTTPError,
    ValueError,
    KeyError,
    TypeError,
    AttributeError,
)


def _run(
    factory: AggregatorFactory,
    operation: Callable[[WorkflowMetricsAggregator], T],
    error_message: str,
    log_label: str,
):
    try:
        with factory() as aggregator:
            return operation(aggregator)
    except UPSTREAM_ERRORS as exc:
        logger.error(
            "%s error: %s",
            log_label,
            getattr(exc, "body", None) or str(exc),
            extra={"status_code": getattr(exc, "status_code", None)},
        )
        return JSONResponse(status_code=500, content={"error": error_message})


@router.get(
    "/actions",
    response_model=ActionsOverviewResponse,
    responses={500: {"model": ErrorResponse}},
)
def get_all_data(factory: AggregatorFactory = Depends(get_aggregator_factory)):
    """Return workflow summaries together with aggregate run/job metrics."""
    return _run(
        factory,
        lambda aggregator: aggregator.get_workflows(),
        "Failed to fetch GitHub Actions data",
        "getAllData",
    )


@router.get(
    "/actions/metrics",
    response_model=MetricsResponse,
    responses={500: {"model": ErrorResponse}},
)
def get_metrics_only(
    workflow: str = Query("all", description="Workflow id, or 'all'"),
    factory: AggregatorFactory = Depends(get_aggregator_factory),
):
    """Return aggregate metrics, optionally for a single workflow."""
    return _run(
        factory,
        lambda aggregator: aggregator.get_metrics(workflow),
        "Failed to fetch metrics",
        "getMetricsOnly",
    )


@router.get(
    "/actions/workflows",
    response_model=WorkflowListResponse,
    responses={500: {"model": ErrorResponse}},
)
def get_workflows_only(factory: AggregatorFactory = Depends(get_aggregator_factory)):
    """Return workflow summaries without metrics."""
    return _run(
        factory,
        lambda aggregator: aggregator.list_workflows(),
        "Failed to fetch workflows",
        "getWorkflowsOnly",
    )
