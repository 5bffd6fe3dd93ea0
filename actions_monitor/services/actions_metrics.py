"""
Workflow run/job aggregation over the GitHub Actions REST API.

Everything is fetched sequentially and recomputed on every call: workflows,
then each workflow's recent runs, then each run's jobs. Any upstream failure
outside the schedule lookup propagates, so callers never see partial data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
from zoneinfo import ZoneInfo

from actions_monitor.dtos import (
    ActionsMetrics,
    ActionsOverviewResponse,
    MetricsResponse,
    RunSummary,
    WorkflowListResponse,
    WorkflowSummary,
)
from actions_monitor.github_client import GitHubClient
from actions_monitor.services.schedules import fetch_schedules

logger = logging.getLogger(__name__)

# Month names are fixed so output does not follow the host LC_TIME
MONTH_ABBR = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a GitHub ISO-8601 timestamp; None when missing or invalid."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def seconds_between(start: Any, end: Any) -> float:
    """Non-negative seconds from ``start`` to ``end``; 0 if either is unusable."""
    started = parse_timestamp(start)
    finished = parse_timestamp(end)
    if started is None or finished is None:
        return 0.0
    return max(0.0, (finished - started).total_seconds())


def format_display_time(value: Optional[datetime], tz_name: str) -> Optional[str]:
    if value is None:
        return None
    local = value.astimezone(ZoneInfo(tz_name))
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return (
        f"{local.day:02d} {MONTH_ABBR[local.month - 1]} {local.year}, "
        f"{hour:02d}:{local.minute:02d} {meridiem}"
    )


def _average(values: List[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


@dataclass
class RunStatistics:
    """Running totals for one aggregation call."""

    total_runs: int = 0
    failed_jobs: int = 0
    total_job_minutes: float = 0.0
    failed_job_minutes: float = 0.0
    job_durations: List[float] = field(default_factory=list)
    queue_times: List[float] = field(default_factory=list)

    def add_run(self, run: Dict[str, Any], jobs: List[Dict[str, Any]]) -> None:
        self.total_runs += 1
        self.queue_times.append(
            seconds_between(run.get("created_at"), run.get("run_started_at"))
        )
        for job in jobs or []:
            self.add_job(job)

    def add_job(self, job: Dict[str, Any]) -> None:
        duration = seconds_between(job.get("started_at"), job.get("completed_at"))
        self.job_durations.append(duration)
        self.total_job_minutes += duration / 60

        # Anything short of an explicit success counts, including null
        if job.get("conclusion") != "success":
            self.failed_jobs += 1
            self.failed_job_minutes += duration / 60

    def to_metrics(self, total_workflows: int, last_updated: str) -> ActionsMetrics:
        avg_run = _average(self.job_durations)
        avg_queue = _average(self.queue_times)
        return ActionsMetrics(
            avgRunTime=f"{avg_run:.1f}s" if avg_run is not None else "0s",
            avgQueueTime=f"{avg_queue:.1f}s" if avg_queue is not None else "0s",
            failureRate=(
                f"{self.failed_jobs / self.total_runs * 100:.1f}%"
                if self.total_runs
                else "0%"
            ),
            failedJobMinutes=f"{self.failed_job_minutes:.1f}",
            totalMinutes=f"{self.total_job_minutes:.1f}",
            totalRuns=self.total_runs,
            totalWorkflows=total_workflows,
            lastUpdated=last_updated,
        )


class WorkflowMetricsAggregator:
    def __init__(
        self,
        client: GitHubClient,
        runs_per_workflow: int = 100,
        prev_runs_limit: int = 5,
        display_timezone: str = "Asia/Kolkata",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.client = client
        self.runs_per_workflow = runs_per_workflow
        self.prev_runs_limit = prev_runs_limit
        self.display_timezone = display_timezone
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @classmethod
    def from_settings(cls, client: GitHubClient, settings) -> "WorkflowMetricsAggregator":
        return cls(
            client,
            runs_per_workflow=settings.RUNS_PER_WORKFLOW,
            prev_runs_limit=settings.PREV_RUNS_LIMIT,
            display_timezone=settings.DISPLAY_TIMEZONE,
        )

    def get_workflows(self) -> ActionsOverviewResponse:
        """Per-workflow summaries plus metrics over every fetched run and job."""
        workflows = self.client.list_workflows()
        stats = RunStatistics()
        summaries: List[WorkflowSummary] = []

        for workflow in workflows:
            schedules = fetch_schedules(self.client, workflow)
            runs = self._fetch_runs(workflow)
            for run in runs:
                stats.add_run(run, self.client.list_run_jobs(run["id"]))
            summaries.append(self._summarize(workflow, schedules, runs))

        logger.info(
            "Aggregated GitHub Actions data",
            extra={
                "repository": self.client.full_name,
                "workflows": len(workflows),
                "runs": stats.total_runs,
                "jobs": len(stats.job_durations),
            },
        )
        return ActionsOverviewResponse(
            metrics=stats.to_metrics(len(workflows), self._now()),
            workflows=summaries,
        )

    def get_metrics(self, workflow: str = "all") -> MetricsResponse:
        """Metrics only, optionally restricted to one workflow id."""
        workflows = self.client.list_workflows()
        if workflow and workflow != "all":
            selected = [wf for wf in workflows if str(wf.get("id")) == str(workflow)]
        else:
            selected = workflows

        stats = RunStatistics()
        for wf in selected:
            for run in self._fetch_runs(wf):
                stats.add_run(run, self.client.list_run_jobs(run["id"]))

        return MetricsResponse(metrics=stats.to_metrics(len(workflows), self._now()))

    def list_workflows(self) -> WorkflowListResponse:
        """Workflow summaries without job fetches or metrics."""
        summaries = []
        for workflow in self.client.list_workflows():
            schedules = fetch_schedules(self.client, workflow)
            summaries.append(
                self._summarize(workflow, schedules, self._fetch_runs(workflow))
            )
        return WorkflowListResponse(workflows=summaries)

    def _fetch_runs(self, workflow: Dict[str, Any]) -> List[Dict[str, Any]]:
        runs = self.client.list_workflow_runs(
            workflow["id"], per_page=self.runs_per_workflow
        )
        return runs[: self.runs_per_workflow]

    def _summarize(
        self,
        workflow: Dict[str, Any],
        schedules: List[str],
        runs: List[Dict[str, Any]],
    ) -> WorkflowSummary:
        prev_runs = [
            RunSummary(
                id=run["id"],
                status=run.get("status"),
                conclusion=run.get("conclusion"),
                created_at=format_display_time(
                    parse_timestamp(run.get("created_at")), self.display_timezone
                ),
                url=run.get("html_url"),
            )
            for run in runs[: self.prev_runs_limit]
        ]
        return WorkflowSummary(
            id=workflow["id"],
            name=workflow.get("name"),
            path=workflow.get("path"),
            state=workflow.get("state"),
            schedules=schedules,
            nextRuns=[],
            prevRuns=prev_runs,
        )

    def _now(self) -> str:
        return format_display_time(self._clock(), self.display_timezone)
