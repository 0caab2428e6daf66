"""Jira API client wrapper (REST v3 issue CRUD, versions, transitions, search)."""

from __future__ import annotations

import hashlib
import json
import logging
import time
from typing import Any

from jira import JIRA, JIRAError

from .config import SEARCH_CACHE_TTL, SEARCH_PAGE_SIZE, JiraSettings
from .errors import FixVersionNotFoundError, JiraRequestError, TransitionNotAvailableError

logger = logging.getLogger(__name__)


def _raise_for_payload(resp, context: str) -> Any:
    """Return the decoded JSON body or raise JiraRequestError.

    Jira reports validation failures either through the HTTP status or through
    ``errorMessages`` / ``errors`` in an otherwise successful body.
    """
    if resp.status_code == 204 or not resp.text:
        if resp.status_code >= 400:
            raise JiraRequestError(f"{context} failed {resp.status_code}", resp.status_code)
        return None
    try:
        data = resp.json()
    except ValueError as exc:
        raise JiraRequestError(f"{context} returned invalid JSON: {resp.text[:200]}", resp.status_code) from exc
    if isinstance(data, dict):
        messages = data.get("errorMessages") or []
        errors = data.get("errors") or {}
        if messages:
            raise JiraRequestError(f"{context} failed: {'; '.join(messages)}", resp.status_code)
        if errors:
            raise JiraRequestError(f"{context} failed: {json.dumps(errors, sort_keys=True)}", resp.status_code)
    if resp.status_code >= 400:
        raise JiraRequestError(f"{context} failed {resp.status_code}: {resp.text[:200]}", resp.status_code)
    return data


class JiraAPI:
    def __init__(self, server: str, email: str, token: str, *, settings: JiraSettings | None = None):
        self.settings = settings or JiraSettings(server=server, email=email, token=token)
        self.server = self.settings.server
        try:
            self.client = JIRA(
                basic_auth=(email, token),
                options={"server": self.server, "rest_api_version": self.settings.api_version},
            )
        except JIRAError as exc:
            raise JiraRequestError(f"Failed to connect to {self.server}: {exc}", exc.status_code) from exc
        # Simple in-memory cache: {(hash): (timestamp, data)}
        self._cache: dict[str, tuple[float, list]] = {}
        self._cache_ttl = SEARCH_CACHE_TTL

    @classmethod
    def from_settings(cls, settings: JiraSettings) -> JiraAPI:
        return cls(settings.server, settings.email, settings.token, settings=settings)

    # ------------------ Internal Helpers ------------------
    @property
    def _session(self):
        session = getattr(self.client, "_session", None)
        if session is None:
            raise JiraRequestError("JIRA session unavailable")
        return session

    def _url(self, path: str) -> str:
        return f"{self.server}/rest/api/{self.settings.api_version}{path}"

    def _request(self, method: str, path: str, context: str, *, params=None, payload=None) -> Any:
        url = self._url(path)
        body = json.dumps(payload) if payload is not None else None
        try:
            resp = self._session.request(method, url, params=params, data=body)
        except JIRAError as exc:
            raise JiraRequestError(f"{context} failed: {exc.text or exc}", exc.status_code) from exc
        return _raise_for_payload(resp, context)

    def clear_cache(self) -> None:
        """Reset the in-memory search cache."""
        cache = getattr(self, "_cache", None)
        if isinstance(cache, dict):
            cache.clear()

    def _cache_key(self, jql: str, fields, expand, page_size: int) -> str:
        payload = {
            "jql": jql,
            "fields": fields,
            "expand": expand,
            "page_size": page_size,
        }
        return hashlib.sha256(json.dumps(payload, sort_keys=True).encode()).hexdigest()

    # ------------------ Issue CRUD ------------------
    def fetch_issue_raw(
        self,
        issue_key: str,
        *,
        expand: list[str] | None = None,
        fields: list[str] | None = None,
    ) -> dict[str, Any]:
        logger.info("Fetching %s (expand=%s)", issue_key, ",".join(expand or []) or "-")
        params: dict[str, Any] = {}
        if expand:
            params["expand"] = ",".join(expand)
        if fields:
            params["fields"] = ",".join(fields)
        data = self._request("GET", f"/issue/{issue_key}", f"Fetch issue {issue_key}", params=params)
        if not isinstance(data, dict):
            raise JiraRequestError(f"Unexpected issue payload type for {issue_key}: {type(data)!r}")
        return data

    def fetch_changelog(self, issue_key: str, fields: list[str] | None = None) -> dict[str, Any]:
        """Fetch an issue with its changelog histories expanded."""
        return self.fetch_issue_raw(issue_key, expand=["changelog"], fields=fields)

    def get_comments(self, issue_key: str) -> list[dict[str, Any]]:
        data = self._request("GET", f"/issue/{issue_key}/comment", f"Fetch comments for {issue_key}")
        return list((data or {}).get("comments", []))

    def update_issue(self, issue_key: str, update: dict[str, Any]) -> None:
        """Apply a raw ``{"fields": ..., "update": ...}`` edit to an issue."""
        self._request("PUT", f"/issue/{issue_key}", f"Update issue {issue_key}", payload=update)

    def add_comment(
        self,
        issue_key: str,
        body: str,
        *,
        visible_to: str | None = None,
        visible_type: str = "role",
    ) -> None:
        add: dict[str, Any] = {"body": body}
        if visible_to:
            add["visibility"] = {"type": visible_type, "value": visible_to}
            logger.info('Adding comment "%s" to %s for %s', body, issue_key, visible_to)
        else:
            logger.info('Adding comment "%s" to %s', body, issue_key)
        self.update_issue(issue_key, {"update": {"comment": [{"add": add}]}})

    def assign(self, issue_key: str, assignee: str, *, account_id: bool = False) -> None:
        """Assign an issue by username (Server/DC) or accountId (Cloud)."""
        logger.info("Assigning %s to %s", issue_key, assignee)
        ref = {"accountId": assignee} if account_id else {"name": assignee}
        self.update_issue(issue_key, {"fields": {"assignee": ref}})

    # ------------------ Workflow Transitions ------------------
    def available_transitions(self, issue_key: str) -> list[tuple[str, str]]:
        try:
            transitions = self.client.transitions(issue_key)
        except JIRAError as exc:
            raise JiraRequestError(f"Failed to list transitions for {issue_key}: {exc}", exc.status_code) from exc
        return [(t["name"], str(t["id"])) for t in transitions]

    def transition(self, issue_key: str, name: str) -> str:
        """Move an issue through the workflow transition called ``name``.

        Returns the transition id that was applied.
        """
        available = self.available_transitions(issue_key)
        wanted = name.strip().lower()
        match = next((tid for tname, tid in available if tname.strip().lower() == wanted), None)
        if match is None:
            offered = ", ".join(tname for tname, _ in available) or "none"
            raise TransitionNotAvailableError(f"Transition '{name}' not available for {issue_key} (offered: {offered})")
        logger.info("Transitioning %s via '%s' (id=%s)", issue_key, name, match)
        try:
            self.client.transition_issue(issue_key, match)
        except JIRAError as exc:
            raise JiraRequestError(f"Failed to transition {issue_key}: {exc}", exc.status_code) from exc
        return match

    # ------------------ Versions & Search ------------------
    def get_fix_version_id(self, project: str, fix_version: str) -> str:
        versions = self._request("GET", f"/project/{project}/versions", f"Fetch versions for {project}") or []
        for version in versions:
            if version.get("name") == fix_version:
                return str(version["id"])
        raise FixVersionNotFoundError(f"Fix version '{fix_version}' not found in project {project}")

    def get_issues_in_fix_version(self, project: str, fix_version: str) -> list[str]:
        version_id = self.get_fix_version_id(project, fix_version)
        jql = f"project = {project} AND fixVersion = {version_id}"
        issues = self.search_enhanced(jql, fields=["key"])
        return [issue["key"] for issue in issues if issue.get("key")]

    def search_enhanced(
        self,
        jql: str,
        fields: list[str] | None = None,
        expand: list[str] | None = None,
        page_size: int = SEARCH_PAGE_SIZE,
    ) -> list[dict[str, Any]]:
        # Cache check
        key = self._cache_key(jql, fields, expand, page_size)
        now = time.time()
        cached = self._cache.get(key)
        if cached and (now - cached[0]) < self._cache_ttl:
            logger.debug("Search cache hit for %s", jql)
            return list(cached[1])
        params: dict[str, Any] = {"jql": jql, "maxResults": page_size}
        if fields:
            params["fields"] = ",".join(fields)
        if expand:
            params["expand"] = ",".join(expand)
        out: list[dict[str, Any]] = []
        token = None
        while True:
            qp = dict(params)
            if token:
                qp["nextPageToken"] = token
            data = self._request("GET", "/search/jql", "Enhanced search", params=qp) or {}
            out.extend(data.get("issues", []))
            token = data.get("nextPageToken")
            if not token or data.get("isLast") is True:
                break
        logger.info("Search returned %d issues for %s", len(out), jql)
        # Store in cache
        self._cache[key] = (now, list(out))
        return out
