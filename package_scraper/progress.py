"""Progress tracking for per-project scrapes."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any


@dataclass
class ProjectProgress:
    group: str
    project: str
    status: str = "pending"  # "pending" | "running" | "completed" | "failed"
    start_time: float | None = None
    end_time: float | None = None
    error: str | None = None

    @property
    def key(self) -> str:
        return f"{self.group}/{self.project}"

    @property
    def duration(self) -> float | None:
        if self.start_time is not None and self.end_time is not None:
            return round(self.end_time - self.start_time, 2)
        return None


class ProgressTracker:
    """Track the scrape outcome of every project in a run."""

    def __init__(self) -> None:
        self.projects: list[ProjectProgress] = []
        self._by_key: dict[str, ProjectProgress] = {}

    def start(self, group: str, project: str) -> None:
        p = ProjectProgress(
            group=group, project=project, status="running", start_time=time.monotonic()
        )
        self.projects.append(p)
        self._by_key[p.key] = p

    def complete(self, group: str, project: str) -> None:
        p = self._by_key.get(f"{group}/{project}")
        if p:
            p.status = "completed"
            p.end_time = time.monotonic()

    def fail(self, group: str, project: str, error: str) -> None:
        p = self._by_key.get(f"{group}/{project}")
        if p:
            p.status = "failed"
            p.end_time = time.monotonic()
            p.error = error

    @property
    def failures(self) -> list[ProjectProgress]:
        return [p for p in self.projects if p.status == "failed"]

    def get_summary(self) -> dict[str, Any]:
        total_duration = sum(p.duration or 0 for p in self.projects)
        return {
            "projects": [
                {
                    "group": p.group,
                    "project": p.project,
                    "status": p.status,
                    "duration": p.duration,
                    "error": p.error,
                }
                for p in self.projects
            ],
            "failed": len(self.failures),
            "total_duration": round(total_duration, 2),
        }
