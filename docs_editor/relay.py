import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from .config import GITLAB_DEFAULT_REF, GITLAB_PAGE_SIZE
from .tree import node_id

logger = logging.getLogger(__name__)

_GITLAB_REPO_PATTERN = re.compile(r"gitlab\.com/(.+?)(?:\.git)?$")


class RelayError(Exception):
    """Upstream failure, rendered as the error envelope with ``status_code``."""

    def __init__(self, status_code: int, error: str, details: Any = None) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details


def parse_project_path(repo_url: str) -> str:
    # https://gitlab.com/my-org/my-repo.git -> my-org/my-repo
    match = _GITLAB_REPO_PATTERN.search((repo_url or "").strip())
    if not match:
        raise RelayError(400, "Invalid GitLab repository URL")
    return match.group(1)


def _encode(value: str) -> str:
    return quote(value, safe="")


def _error_body(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text or None


# == GitLab == #
class GitLabRelay:
    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    async def _get(self, url: str, token: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token}"}
        try:
            resp = await self.client.get(url, headers=headers, params=params)
        except httpx.RequestError as e:
            logger.error("GitLab request failed: %s", e)
            raise RelayError(502, "Failed to reach GitLab", details=str(e)) from e

        if resp.is_error:
            logger.error("GitLab API error: %s %s", resp.status_code, resp.text)
            raise RelayError(resp.status_code, f"GitLab API error: {resp.status_code}", details=_error_body(resp))
        return resp

    async def list_files(self, repo_url: str, token: str) -> List[Dict[str, Any]]:
        """Flat listing of the whole repository in the local folder/file vocabulary."""
        project = _encode(parse_project_path(repo_url))
        url = f"projects/{project}/repository/tree"

        entries: List[Dict[str, Any]] = []
        page: Optional[str] = "1"
        while page:
            resp = await self._get(url, token, params={"recursive": "true", "per_page": GITLAB_PAGE_SIZE, "page": page})
            entries.extend(resp.json())
            page = resp.headers.get("x-next-page") or None

        return [
            {
                "id": node_id(entry["path"]),
                "name": entry["name"],
                "path": entry["path"],
                "type": "folder" if entry.get("type") == "tree" else "file",
            }
            for entry in entries
        ]

    async def file_content(self, repo_url: str, token: str, file_path: str, ref: Optional[str] = None) -> str:
        project = _encode(parse_project_path(repo_url))
        url = f"projects/{project}/repository/files/{_encode(file_path)}/raw"
        resp = await self._get(url, token, params={"ref": ref or GITLAB_DEFAULT_REF})
        return resp.text


# == AI backend == #
class AIRelay:
    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    async def chat(self, payload: Dict[str, Any]) -> Any:
        try:
            resp = await self.client.post("api/ai/chat", json=payload)
        except httpx.RequestError as e:
            logger.error("AI backend request failed: %s", e)
            raise RelayError(502, "Backend request failed", details=str(e)) from e

        if resp.is_error:
            body = _error_body(resp)
            error = body.get("error") if isinstance(body, dict) else None
            details = body.get("details") if isinstance(body, dict) else body
            raise RelayError(resp.status_code, error or "Backend request failed", details=details)
        return resp.json()
