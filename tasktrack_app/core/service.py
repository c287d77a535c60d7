"""TaskService: orchestrates fetching Redmine issues and mapping them to tasks."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date

import pandas as pd

from .mappers import map_issue, tasks_to_dataframe
from .redmine_client import RedmineAPI

ProgressCallback = Callable[[str, int | None, int | None], None]

logger = logging.getLogger(__name__)


class TaskService:
    def __init__(self, api: RedmineAPI):
        self.api = api

    # ------------------ Fetch Methods ------------------
    def fetch_user_tasks(
        self,
        project_name: str,
        user: int | str,
        *,
        progress: ProgressCallback | None = None,
        refresh: bool = False,
        today: date | None = None,
    ) -> pd.DataFrame:
        """Tasks for issues ``user`` moved into a review state in ``project_name``.

        ``refresh`` clears the client cache first so the dataset is fetched
        fresh rather than served from the five-minute window.
        """
        if refresh:
            self.api.clear_cache()
            if progress:
                progress("Preparing fresh Redmine data", None, None)
        if progress:
            progress(f"Collecting issues for {project_name}", None, None)
        raw = self.api.get_issues_with_user_interaction(project_name, user)
        if progress:
            progress("Mapping issues to tasks", len(raw), len(raw))
        logger.info("Fetched %s issues with user interaction in %s", len(raw), project_name)
        return self._raw_to_df(raw, today=today)

    # ------------------ Internal Helpers ------------------
    def _raw_to_df(self, raw_issues, *, today: date | None = None) -> pd.DataFrame:
        tasks = [map_issue(r, today=today) for r in raw_issues or []]
        return tasks_to_dataframe(tasks)
