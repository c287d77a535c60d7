"""Redmine REST client (offset pagination + in-flight request deduplication)."""

from __future__ import annotations

import json
import logging
import math
import threading
import time
from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any
from urllib.parse import urljoin

import pandas as pd
import requests

from .config import (
    CACHE_TTL_SECONDS,
    CODE_REVIEW_RULE,
    DEFAULT_TRANSITION_RULES,
    FT_REVIEW_RULE,
    ISSUES_PAGE_SIZE,
    JOURNAL_BATCH_DELAY_MS,
    JOURNAL_BATCH_SIZE,
    MAX_PROJECT_ISSUES,
    REDMINE_API_KEY_HEADER,
    REQUEST_TIMEOUT_SECONDS,
    USER_LOOKUP_RECENT_ISSUES,
    StatusTransitionRule,
)

logger = logging.getLogger(__name__)


class RedmineAPIError(RuntimeError):
    """Raised for any non-2xx response from the tracker."""

    def __init__(self, status_code: int, reason: str | None, body: Any = None):
        self.status_code = status_code
        self.reason = reason or ""
        self.body = body if body is not None else {}
        super().__init__(
            f"Redmine API error ({status_code} {self.reason}): {json.dumps(self.body, default=str)}"
        )


def _journal_timestamp(journal: Mapping[str, Any]) -> float:
    ts = pd.to_datetime(journal.get("created_on"), utc=True, errors="coerce")
    if ts is None or pd.isna(ts):
        return float("-inf")
    return ts.timestamp()


class RedmineAPI:
    def __init__(
        self,
        server: str,
        api_key: str,
        *,
        session: requests.Session | None = None,
        cache_ttl: float = CACHE_TTL_SECONDS,
        transition_rules: Mapping[str, StatusTransitionRule] | None = None,
    ):
        self.server = server if server.endswith("/") else f"{server}/"
        self.api_key = api_key
        self.session = session or requests.Session()
        self.transition_rules = dict(transition_rules or DEFAULT_TRANSITION_RULES)
        # In-flight and completed responses: {key: (created_at, future)}
        self._cache: dict[str, tuple[float, Future]] = {}
        self._cache_ttl = cache_ttl  # seconds
        self._cache_lock = threading.Lock()
        self._clock = time.monotonic

    # ------------------ Request / Cache ------------------
    def clear_cache(self) -> None:
        """Drop every cached or pending response."""
        logger.debug("Clearing Redmine request cache (%s entries)", len(self._cache))
        with self._cache_lock:
            self._cache.clear()

    def _cache_key(self, endpoint: str, params: Mapping[str, str]) -> str:
        query = "&".join(f"{k}={params[k]}" for k in sorted(params))
        return f"{self.server}:{endpoint}:{query}"

    def _evict_expired(self, now: float) -> None:
        """Drop every entry older than the TTL. Caller holds ``_cache_lock``."""
        expired = [k for k, (created, _) in self._cache.items() if now - created >= self._cache_ttl]
        for k in expired:
            del self._cache[k]
        if expired:
            logger.debug("Cache expired for %s entries", len(expired))

    def _request(self, endpoint: str, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """GET ``endpoint``, sharing the response with identical concurrent callers.

        The first caller for a key performs the HTTP call; everyone else waits on
        the same future. Every request sweeps out entries older than the TTL, and a
        failed call is evicted at once so a retry reaches the network.
        """
        str_params = {k: str(v) for k, v in (params or {}).items()}
        key = self._cache_key(endpoint, str_params)
        now = self._clock()
        with self._cache_lock:
            self._evict_expired(now)
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug("Reusing existing request for %s", endpoint)
                future = cached[1]
                owner = False
            else:
                future = Future()
                self._cache[key] = (now, future)
                owner = True

        if owner:
            logger.debug("Making new request for %s", endpoint)
            try:
                future.set_result(self._make_request(endpoint, str_params))
            except Exception as exc:
                with self._cache_lock:
                    current = self._cache.get(key)
                    if current is not None and current[1] is future:
                        del self._cache[key]
                future.set_exception(exc)
        return future.result()

    def _make_request(self, endpoint: str, params: Mapping[str, str]) -> dict[str, Any]:
        url = urljoin(self.server, endpoint)
        query = {k: v for k, v in params.items() if v}
        resp = self.session.get(
            url,
            params=query,
            headers={"Content-Type": "application/json", REDMINE_API_KEY_HEADER: self.api_key},
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
        if not 200 <= resp.status_code < 300:
            try:
                body = resp.json()
            except ValueError:
                body = {}
            raise RedmineAPIError(resp.status_code, resp.reason, body)
        return resp.json()

    # ------------------ Projects / Users ------------------
    def find_project(self, project_name: str) -> dict[str, Any] | None:
        """Return the project whose name matches exactly (case-insensitive).

        The remote ``name`` filter is loose, so the exact match happens here.
        """
        data = self._request("projects.json", {"name": project_name})
        wanted = project_name.strip().lower()
        for project in data.get("projects") or []:
            if str(project.get("name", "")).strip().lower() == wanted:
                return project
        return None

    def find_user_id_by_username(self, username: str) -> int | None:
        """Resolve a login/name to a user id.

        Checks the authenticated account first. Otherwise scans authors of
        recently updated issues, so users without recent issues are missed.
        """
        wanted = username.strip().lower()
        try:
            account = self._request("my/account.json")
            user = account.get("user") or {}
            if str(user.get("login", "")).lower() == wanted:
                return user.get("id")
            recent = self._request(
                "issues.json",
                {"limit": USER_LOOKUP_RECENT_ISSUES, "sort": "updated_on:desc"},
            )
            for issue in recent.get("issues") or []:
                author = issue.get("author") or {}
                if str(author.get("name", "")).lower() == wanted:
                    return author.get("id")
            return None
        except Exception as exc:
            logger.error("Error finding user id for username %r: %s", username, exc)
            return None

    def get_current_user(self) -> dict[str, Any] | None:
        try:
            return self._request("users/current.json").get("user")
        except Exception as exc:
            logger.error("Error fetching current user: %s", exc)
            return None

    def get_issue_statuses(self) -> list[dict[str, Any]]:
        return self._request("issue_statuses.json").get("issue_statuses") or []

    # ------------------ Issues ------------------
    def get_issues_by_project_id(self, project_id: int | str) -> list[dict[str, Any]]:
        """Fetch open and closed issues, most recently updated first.

        Stops on an empty page, on reaching ``total_count`` from the first
        page, or at the MAX_PROJECT_ISSUES cap.
        """
        out: list[dict[str, Any]] = []
        offset = 0
        total = 0
        while True:
            data = self._request(
                "issues.json",
                {
                    "project_id": project_id,
                    "offset": offset,
                    "limit": ISSUES_PAGE_SIZE,
                    "status_id": "*",
                    "sort": "updated_on:desc",
                },
            )
            issues = data.get("issues") or []
            if offset == 0:
                total = int(data.get("total_count") or 0)
            out.extend(issues)
            if not issues or len(out) >= MAX_PROJECT_ISSUES or len(out) >= total:
                break
            offset += len(issues)
        return out[:MAX_PROJECT_ISSUES]

    def get_issue_with_journals(self, issue_id: int | str) -> dict[str, Any]:
        data = self._request(f"issues/{issue_id}.json", {"include": "journals"})
        return data.get("issue") or {}

    def get_my_issues_in_project_with_journals(
        self,
        issues: Sequence[dict[str, Any]],
        batch_size: int = JOURNAL_BATCH_SIZE,
        delay_ms: int = JOURNAL_BATCH_DELAY_MS,
    ) -> list[dict[str, Any]]:
        """Hydrate journals batch by batch, keeping only issues that have any.

        Each batch runs concurrently; a fixed delay separates batches. A failed
        fetch becomes an empty-journal placeholder and is filtered out.
        """
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        issues = list(issues)
        results: list[dict[str, Any]] = []
        total_batches = math.ceil(len(issues) / batch_size)
        for start in range(0, len(issues), batch_size):
            batch = issues[start : start + batch_size]
            logger.info(
                "Processing batch %s/%s (%s issues)",
                start // batch_size + 1,
                total_batches,
                len(batch),
            )
            with ThreadPoolExecutor(max_workers=len(batch)) as pool:
                hydrated = list(pool.map(self._hydrate_journals, batch))
            results.extend(issue for issue in hydrated if issue.get("journals"))
            if start + batch_size < len(issues) and delay_ms > 0:
                time.sleep(delay_ms / 1000.0)
        logger.info("Processed %s issues, found %s with journal entries", len(issues), len(results))
        return results

    def _hydrate_journals(self, issue: dict[str, Any]) -> dict[str, Any]:
        try:
            return self.get_issue_with_journals(issue.get("id"))
        except Exception as exc:
            logger.warning("Error fetching journals for issue #%s: %s", issue.get("id"), exc)
            return {**issue, "journals": []}

    # ------------------ Journal Filters ------------------
    def filter_issues_by_user_interaction(
        self, issues: Iterable[dict[str, Any]], user_id: int
    ) -> list[dict[str, Any]]:
        out = []
        for issue in issues:
            if (issue.get("author") or {}).get("id") == user_id:
                out.append(issue)
                continue
            journals = issue.get("journals") or []
            if any((j.get("user") or {}).get("id") == user_id for j in journals):
                out.append(issue)
        return out

    def filter_issues_by_transition(
        self,
        issues: Iterable[dict[str, Any]],
        user_id: int,
        rule: StatusTransitionRule,
    ) -> list[dict[str, Any]]:
        """Keep issues where ``user_id`` set the rule's first status, then later the second.

        Journals by other users are ignored; the user's own journals are read
        in ``created_on`` order.
        """
        out = []
        for issue in issues:
            journals = issue.get("journals") or []
            if not journals:
                continue
            user_journals = sorted(
                (j for j in journals if (j.get("user") or {}).get("id") == user_id),
                key=_journal_timestamp,
            )
            reached_first = False
            reached_second = False
            for journal in user_journals:
                for detail in journal.get("details") or []:
                    if detail.get("name") != "status_id" or not detail.get("new_value"):
                        continue
                    new_value = str(detail["new_value"])
                    if new_value == rule.first_status_id:
                        reached_first = True
                    elif reached_first and new_value == rule.second_status_id:
                        reached_second = True
            if reached_first and reached_second:
                out.append(issue)
        return out

    def filter_issues_user_moved_to_code_review(
        self, issues: Iterable[dict[str, Any]], user_id: int
    ) -> list[dict[str, Any]]:
        rule = self.transition_rules.get(CODE_REVIEW_RULE.name, CODE_REVIEW_RULE)
        return self.filter_issues_by_transition(issues, user_id, rule)

    def filter_issues_user_moved_to_ft_review(
        self, issues: Iterable[dict[str, Any]], user_id: int
    ) -> list[dict[str, Any]]:
        rule = self.transition_rules.get(FT_REVIEW_RULE.name, FT_REVIEW_RULE)
        return self.filter_issues_by_transition(issues, user_id, rule)

    # ------------------ Orchestration ------------------
    def get_issues_with_user_interaction(
        self,
        project_name: str,
        user: int | str,
    ) -> list[dict[str, Any]]:
        """Issues in ``project_name`` that ``user`` moved into either review state."""
        if isinstance(user, str) and not user.strip().isdigit():
            user_id = self.find_user_id_by_username(user)
            if user_id is None:
                logger.error("User with username %r not found", user)
                return []
        else:
            user_id = int(user)

        project = self.find_project(project_name)
        if not project:
            return []
        all_issues = self.get_issues_by_project_id(project["id"])
        with_journals = self.get_my_issues_in_project_with_journals(all_issues)
        interacted = self.filter_issues_by_user_interaction(with_journals, user_id)

        combined: dict[Any, dict[str, Any]] = {}
        for issue in self.filter_issues_user_moved_to_code_review(interacted, user_id):
            combined[issue.get("id")] = issue
        for issue in self.filter_issues_user_moved_to_ft_review(interacted, user_id):
            combined[issue.get("id")] = issue
        return list(combined.values())
