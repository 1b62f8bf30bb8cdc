"""GitHub collaborator built on the ``gh api`` CLI.

``gh`` picks up GITHUB_TOKEN from the environment, which is what the Actions
runner provides.
"""

from __future__ import annotations

import json
import logging
import subprocess
from datetime import datetime
from typing import Any, Callable

from nightwatch.exceptions import CollaboratorError
from nightwatch.models import ChangedFile, CommitInfo, OpenChange, normalize_status

logger = logging.getLogger(__name__)

Runner = Callable[..., subprocess.CompletedProcess]

PER_PAGE = 100


def _parse_time(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


class GhClient:
    """Change source and report sink for one ``owner/name`` repository."""

    def __init__(self, repo: str, runner: Runner = subprocess.run, timeout: int = 15):
        self.repo = repo
        self._runner = runner
        self._timeout = timeout

    def _api(
        self,
        path: str,
        method: str = "GET",
        fields: dict[str, str] | None = None,
    ) -> Any:
        cmd = ["gh", "api"]
        if method != "GET":
            cmd += ["--method", method]
        cmd.append(path)
        for key, value in (fields or {}).items():
            cmd += ["-f", f"{key}={value}"]

        try:
            result = self._runner(cmd, capture_output=True, text=True, timeout=self._timeout)
        except (subprocess.TimeoutExpired, FileNotFoundError) as e:
            raise CollaboratorError(f"{method} {path}", str(e)) from e
        if result.returncode != 0:
            raise CollaboratorError(f"{method} {path}", (result.stderr or "").strip())

        if not result.stdout.strip():
            return None
        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise CollaboratorError(f"{method} {path}", f"invalid JSON: {e}") from e

    def list_changed_files(self, change_id: int) -> list[ChangedFile]:
        data = self._api(f"repos/{self.repo}/pulls/{change_id}/files?per_page={PER_PAGE}") or []
        return [
            ChangedFile(
                path=item["filename"],
                status=normalize_status(item.get("status")),
                additions=int(item.get("additions") or 0),
                deletions=int(item.get("deletions") or 0),
            )
            for item in data
        ]

    def list_open_changes(self) -> list[OpenChange]:
        data = self._api(f"repos/{self.repo}/pulls?state=open&per_page={PER_PAGE}") or []
        return [OpenChange(id=int(p["number"]), title=p.get("title") or "") for p in data]

    def list_commits(self, change_id: int) -> list[CommitInfo]:
        data = self._api(f"repos/{self.repo}/pulls/{change_id}/commits?per_page={PER_PAGE}") or []
        commits: list[CommitInfo] = []
        for c in data:
            author = (c.get("commit") or {}).get("author") or {}
            commits.append(
                CommitInfo(
                    author_login=(c.get("author") or {}).get("login"),
                    author_name=author.get("name"),
                    timestamp=_parse_time(author.get("date")),
                )
            )
        return commits

    def upsert_comment(self, change_id: int, body: str, marker: str) -> str:
        """Replace the comment carrying ``marker``, or post a new one.

        Returns "updated" or "created".
        """
        comments = self._api(
            f"repos/{self.repo}/issues/{change_id}/comments?per_page={PER_PAGE}"
        ) or []
        existing = next((c for c in comments if marker in (c.get("body") or "")), None)

        if marker not in body:
            body = f"{marker}\n{body}"

        if existing:
            self._api(
                f"repos/{self.repo}/issues/comments/{existing['id']}",
                method="PATCH",
                fields={"body": body},
            )
            logger.info("Updated report comment %s on #%s", existing["id"], change_id)
            return "updated"

        self._api(
            f"repos/{self.repo}/issues/{change_id}/comments",
            method="POST",
            fields={"body": body},
        )
        logger.info("Posted report comment on #%s", change_id)
        return "created"
