"""GitHub Actions monitor DTOs"""

from typing import List, Optional, Union

from pydantic import BaseModel, Field


class RunSummary(BaseModel):
    id: Union[int, str]
    status: Optional[str] = None
    conclusion: Optional[str] = None
    created_at: Optional[str] = None  # "dd Mon yyyy, hh:mm AM" in the display zone
    url: Optional[str] = None


class WorkflowSummary(BaseModel):
    id: Union[int, str]
    name: Optional[str] = None
    path: Optional[str] = None
    state: Optional[str] = None
    schedules: List[str] = Field(default_factory=list)
    nextRuns: List[str] = Field(default_factory=list)
    prevRuns: List[RunSummary] = Field(default_factory=list)


class ActionsMetrics(BaseModel):
    avgRunTime: str
    avgQueueTime: str
    failureRate: str
    failedJobMinutes: str
    totalMinutes: str
    totalRuns: int
    totalWorkflows: int
    lastUpdated: str


class ActionsOverviewResponse(BaseModel):
    metrics: ActionsMetrics
    workflows: List[WorkflowSummary]


class MetricsResponse(BaseModel):
    metrics: ActionsMetrics


class WorkflowListResponse(BaseModel):
    workflows: List[WorkflowSummary]


class ErrorResponse(BaseModel):
    error: str
