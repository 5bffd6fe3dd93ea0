import unittest
from datetime import datetime, timezone
from unittest.mock import MagicMock

from actions_monitor.github_exceptions import GithubAPIError
from actions_monitor.services.actions_metrics import (
    RunStatistics,
    WorkflowMetricsAggregator,
    format_display_time,
    seconds_between,
)

FIXED_NOW = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
FIXED_NOW_DISPLAY = "01 Jan 2024, 03:30 PM"  # Asia/Kolkata


def make_run(run_id, created="2024-01-01T10:00:00Z", started="2024-01-01T10:00:10Z", **extra):
    run = {
        "id": run_id,
        "status": "completed",
        "conclusion": "success",
        "created_at": created,
        "run_started_at": started,
        "html_url": f"https://github.com/acme/widgets/actions/runs/{run_id}",
    }
    run.update(extra)
    return run


def make_job(conclusion="success", started="2024-01-01T10:00:10Z", completed="2024-01-01T10:02:10Z"):
    return {"conclusion": conclusion, "started_at": started, "completed_at": completed}


def make_client(workflows, runs_by_workflow=None, jobs_by_run=None):
    client = MagicMock()
    client.full_name = "acme/widgets"
    client.list_workflows.return_value = workflows
    client.get_file_content.return_value = None
    client.list_workflow_runs.side_effect = lambda wf_id, per_page=100: (runs_by_workflow or {}).get(wf_id, [])
    client.list_run_jobs.side_effect = lambda run_id: (jobs_by_run or {}).get(run_id, [])
    return client


def make_aggregator(client):
    return WorkflowMetricsAggregator(client, clock=lambda: FIXED_NOW)


WORKFLOW = {"id": 1, "name": "CI", "path": ".github/workflows/ci.yml", "state": "active"}


class TestTimeHelpers(unittest.TestCase):
    def test_seconds_between(self):
        self.assertEqual(seconds_between("2024-01-01T10:00:00Z", "2024-01-01T10:02:00Z"), 120.0)
        self.assertEqual(seconds_between("2024-01-01T10:00:00+00:00", "2024-01-01T10:00:01.500000+00:00"), 1.5)

    def test_seconds_between_missing_or_invalid(self):
        self.assertEqual(seconds_between(None, "2024-01-01T10:00:00Z"), 0.0)
        self.assertEqual(seconds_between("2024-01-01T10:00:00Z", None), 0.0)
        self.assertEqual(seconds_between("", ""), 0.0)
        self.assertEqual(seconds_between("not-a-date", "2024-01-01T10:00:00Z"), 0.0)

    def test_seconds_between_never_negative(self):
        self.assertEqual(seconds_between("2024-01-01T10:05:00Z", "2024-01-01T10:00:00Z"), 0.0)

    def test_format_display_time(self):
        self.assertEqual(format_display_time(FIXED_NOW, "Asia/Kolkata"), FIXED_NOW_DISPLAY)
        self.assertEqual(format_display_time(FIXED_NOW, "UTC"), "01 Jan 2024, 10:00 AM")
        self.assertIsNone(format_display_time(None, "UTC"))

    def test_format_display_time_hour_edges(self):
        midnight = datetime(2023, 12, 31, 0, 5, tzinfo=timezone.utc)
        noon = datetime(2023, 12, 31, 12, 0, tzinfo=timezone.utc)
        self.assertEqual(format_display_time(midnight, "UTC"), "31 Dec 2023, 12:05 AM")
        self.assertEqual(format_display_time(noon, "UTC"), "31 Dec 2023, 12:00 PM")


class TestRunStatistics(unittest.TestCase):
    def test_missing_timestamps_default_to_zero(self):
        stats = RunStatistics()
        stats.add_run(
            make_run(1, created=None, started=None),
            [make_job(started=None), make_job(completed=None)],
        )
        self.assertEqual(stats.queue_times, [0.0])
        self.assertEqual(stats.job_durations, [0.0, 0.0])
        metrics = stats.to_metrics(1, FIXED_NOW_DISPLAY)
        self.assertEqual(metrics.avgQueueTime, "0.0s")
        self.assertEqual(metrics.avgRunTime, "0.0s")

    def test_non_success_conclusions_count_as_failed(self):
        stats = RunStatistics()
        jobs = [make_job(c) for c in (None, "failure", "cancelled", "skipped", "Success", "success")]
        stats.add_run(make_run(1), jobs)
        self.assertEqual(stats.failed_jobs, 5)

    def test_failure_rate_divides_by_runs(self):
        stats = RunStatistics()
        stats.add_run(make_run(1), [make_job("failure")])
        stats.add_run(make_run(2), [make_job("success")])
        stats.add_run(make_run(3), [])
        metrics = stats.to_metrics(1, FIXED_NOW_DISPLAY)
        self.assertEqual(metrics.totalRuns, 3)
        self.assertEqual(metrics.failureRate, "33.3%")

    def test_empty_statistics(self):
        metrics = RunStatistics().to_metrics(0, FIXED_NOW_DISPLAY)
        self.assertEqual(metrics.avgRunTime, "0s")
        self.assertEqual(metrics.avgQueueTime, "0s")
        self.assertEqual(metrics.failureRate, "0%")
        self.assertEqual(metrics.totalMinutes, "0.0")
        self.assertEqual(metrics.failedJobMinutes, "0.0")


class TestWorkflowMetricsAggregator(unittest.TestCase):
    def test_no_workflows(self):
        result = make_aggregator(make_client([])).get_workflows()
        self.assertEqual(
            result.model_dump(),
            {
                "metrics": {
                    "avgRunTime": "0s",
                    "avgQueueTime": "0s",
                    "failureRate": "0%",
                    "failedJobMinutes": "0.0",
                    "totalMinutes": "0.0",
                    "totalRuns": 0,
                    "totalWorkflows": 0,
                    "lastUpdated": FIXED_NOW_DISPLAY,
                },
                "workflows": [],
            },
        )

    def test_single_successful_job(self):
        client = make_client([WORKFLOW], {1: [make_run(10)]}, {10: [make_job("success")]})
        result = make_aggregator(client).get_workflows()
        metrics = result.metrics
        self.assertEqual(metrics.totalRuns, 1)
        self.assertEqual(metrics.avgRunTime, "120.0s")
        self.assertEqual(metrics.avgQueueTime, "10.0s")
        self.assertEqual(metrics.failureRate, "0.0%")
        self.assertEqual(metrics.totalMinutes, "2.0")
        self.assertEqual(metrics.failedJobMinutes, "0.0")

        workflow = result.workflows[0]
        self.assertEqual(workflow.id, 1)
        self.assertEqual(workflow.name, "CI")
        self.assertEqual(workflow.path, ".github/workflows/ci.yml")
        self.assertEqual(workflow.state, "active")
        self.assertEqual(workflow.nextRuns, [])
        self.assertEqual(
            workflow.prevRuns[0].model_dump(),
            {
                "id": 10,
                "status": "completed",
                "conclusion": "success",
                "created_at": FIXED_NOW_DISPLAY,
                "url": "https://github.com/acme/widgets/actions/runs/10",
            },
        )

    def test_single_failed_job(self):
        client = make_client([WORKFLOW], {1: [make_run(10)]}, {10: [make_job("failure")]})
        metrics = make_aggregator(client).get_workflows().metrics
        self.assertEqual(metrics.failureRate, "100.0%")
        self.assertEqual(metrics.failedJobMinutes, "2.0")
        self.assertEqual(metrics.totalMinutes, "2.0")

    def test_prev_runs_trimmed_but_all_runs_aggregated(self):
        runs = [make_run(i) for i in range(100)]
        jobs = {i: [make_job()] for i in range(100)}
        client = make_client([WORKFLOW], {1: runs}, jobs)
        result = make_aggregator(client).get_workflows()
        self.assertEqual([r.id for r in result.workflows[0].prevRuns], [0, 1, 2, 3, 4])
        self.assertEqual(result.metrics.totalRuns, 100)
        self.assertEqual(client.list_run_jobs.call_count, 100)
        client.list_workflow_runs.assert_called_once_with(1, per_page=100)

    def test_schedules_reported_next_runs_empty(self):
        client = make_client([WORKFLOW])
        client.get_file_content.return_value = "on:\n  schedule:\n    - cron: '0 3 * * *'\n"
        workflow = make_aggregator(client).get_workflows().workflows[0]
        self.assertEqual(workflow.schedules, ["0 3 * * *"])
        self.assertEqual(workflow.nextRuns, [])

    def test_invalid_created_at_is_not_formatted(self):
        client = make_client([WORKFLOW], {1: [make_run(10, created="garbage")]})
        result = make_aggregator(client).get_workflows()
        self.assertIsNone(result.workflows[0].prevRuns[0].created_at)
        self.assertEqual(result.metrics.avgQueueTime, "0.0s")

    def test_failure_on_second_workflow_aborts(self):
        second = {"id": 2, "name": "Deploy", "path": ".github/workflows/deploy.yml", "state": "active"}
        client = make_client([WORKFLOW, second], {1: [make_run(10)]}, {10: [make_job()]})

        def runs(wf_id, per_page=100):
            if wf_id == 2:
                raise GithubAPIError("boom", status_code=502, body="Bad Gateway")
            return [make_run(10)]

        client.list_workflow_runs.side_effect = runs
        with self.assertRaises(GithubAPIError):
            make_aggregator(client).get_workflows()

    def test_get_metrics_filters_by_workflow_id(self):
        second = {"id": 2, "name": "Deploy", "path": ".github/workflows/deploy.yml", "state": "active"}
        client = make_client(
            [WORKFLOW, second],
            {1: [make_run(10)], 2: [make_run(20), make_run(21)]},
            {10: [make_job("failure")], 20: [make_job()], 21: [make_job()]},
        )
        aggregator = make_aggregator(client)

        filtered = aggregator.get_metrics("2").metrics
        self.assertEqual(filtered.totalRuns, 2)
        self.assertEqual(filtered.failureRate, "0.0%")
        self.assertEqual(filtered.totalWorkflows, 2)

        everything = aggregator.get_metrics().metrics
        self.assertEqual(everything.totalRuns, 3)
        self.assertEqual(everything.failureRate, "33.3%")
        client.get_file_content.assert_not_called()

    def test_get_metrics_unknown_workflow(self):
        client = make_client([WORKFLOW], {1: [make_run(10)]}, {10: [make_job()]})
        metrics = make_aggregator(client).get_metrics("999").metrics
        self.assertEqual(metrics.totalRuns, 0)
        self.assertEqual(metrics.failureRate, "0%")

    def test_list_workflows_skips_jobs(self):
        client = make_client([WORKFLOW], {1: [make_run(i) for i in range(8)]})
        result = make_aggregator(client).list_workflows()
        self.assertEqual(len(result.workflows[0].prevRuns), 5)
        client.list_run_jobs.assert_not_called()


if __name__ == "__main__":
    unittest.main()
