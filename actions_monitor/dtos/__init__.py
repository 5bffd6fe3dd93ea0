from .actions import (
    ActionsMetrics,
    ActionsOverviewResponse,
    ErrorResponse,
    MetricsResponse,
    RunSummary,
    WorkflowListResponse,
    WorkflowSummary,
)

__all__ = [
    "ActionsMetrics",
    "ActionsOverviewResponse",
    "ErrorResponse",
    "MetricsResponse",
    "RunSummary",
    "WorkflowListResponse",
    "WorkflowSummary",
]
