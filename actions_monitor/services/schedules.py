"""Cron schedule extraction from workflow definition files."""

from __future__ import annotations

import binascii
import json
import logging
from typing import Any, Dict, List

import httpx
import yaml

from actions_monitor.github_client import GitHubClient
from actions_monitor.github_exceptions import GithubError

logger = logging.getLogger(__name__)


def parse_schedules(text: str | None) -> List[Any]:
    """Return the raw ``on.schedule`` entries of a workflow YAML document."""
    if not text:
        return []
    parsed = yaml.safe_load(text)
    if not isinstance(parsed, dict):
        return []

    # YAML 1.1 resolves a bare `on` key to boolean True
    triggers = parsed.get("on", parsed.get(True))
    if not isinstance(triggers, dict):
        return []

    raw_schedule = triggers.get("schedule")
    if not raw_schedule:
        return []
    if isinstance(raw_schedule, list):
        return raw_schedule
    if isinstance(raw_schedule, (dict, str)):
        return [raw_schedule]
    return []


def schedule_strings(entries: List[Any]) -> List[str]:
    """Normalise schedule entries to cron strings (JSON for anything unrecognised)."""
    out: List[str] = []
    for entry in entries or []:
        if entry is None:
            continue
        if isinstance(entry, str):
            out.append(entry.strip())
        elif isinstance(entry, dict):
            if entry.get("cron"):
                out.append(str(entry["cron"]).strip())
            else:
                out.append(json.dumps(entry, default=str))
        else:
            out.append(str(entry))
    return out


def fetch_schedules(client: GitHubClient, workflow: Dict[str, Any]) -> List[str]:
    """Best-effort schedule lookup; any failure yields an empty list."""
    path = workflow.get("path")
    if not path:
        return []
    try:
        content = client.get_file_content(path)
        return schedule_strings(parse_schedules(content))
    except (GithubError, httpx.HTTPError, yaml.YAMLError, binascii.Error, UnicodeDecodeError) as exc:
        logger.warning(
            "Failed to fetch or parse workflow file",
            extra={
                "path": path,
                "error": str(exc),
                "body": getattr(exc, "body", None),
            },
        )
        return []
