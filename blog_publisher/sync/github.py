"""GitHub REST API client scoped to one repository branch."""

import base64
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from blog_publisher.core.exceptions import RemoteError

logger = logging.getLogger(__name__)

API_URL = "https://api.github.com"


@dataclass(frozen=True)
class RemoteFile:
    """A file that exists on the branch, with its blob identity."""
    path: str
    sha: str
    content: bytes


class GitHubClient:
    """GitHub API client using httpx.

    Only the Git data endpoints (refs, commits, trees) and the contents
    endpoint are used.
    """

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        branch: str = "main",
        base_url: str = API_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self.branch = branch
        self.http = httpx.Client(
            base_url=base_url,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "User-Agent": "blog-publisher",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.repo_path}/{endpoint}"
        logger.debug("%s %s", method, url)
        try:
            response = self.http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise RemoteError(f"{method} {url} failed: {e}") from e
        return response

    def _json(self, method: str, endpoint: str, **kwargs: Any) -> Dict[str, Any]:
        response = self._request(method, endpoint, **kwargs)
        if response.is_error:
            raise RemoteError(
                f"{method} {endpoint} returned {response.status_code}: {_error_message(response)}",
                status_code=response.status_code,
            )
        return response.json()

    # ------------------------------------------------------------------
    # Git data API
    # ------------------------------------------------------------------
    def get_ref(self) -> str:
        """Return the sha of the commit the branch points at."""
        data = self._json("GET", f"git/ref/heads/{self.branch}")
        return data["object"]["sha"]

    def get_commit(self, commit_sha: str) -> Dict[str, Any]:
        return self._json("GET", f"git/commits/{commit_sha}")

    def get_tree(self, tree_sha: str, recursive: bool = True) -> Dict[str, Any]:
        params = {"recursive": "1"} if recursive else None
        return self._json("GET", f"git/trees/{tree_sha}", params=params)

    def create_tree(self, base_tree: str, entries: List[Dict[str, Any]]) -> str:
        data = self._json("POST", "git/trees", json={"base_tree": base_tree, "tree": entries})
        return data["sha"]

    def create_commit(self, message: str, tree_sha: str, parent_sha: str) -> str:
        data = self._json(
            "POST",
            "git/commits",
            json={"message": message, "tree": tree_sha, "parents": [parent_sha]},
        )
        return data["sha"]

    def update_ref(self, commit_sha: str) -> None:
        """Move the branch; GitHub refuses anything but a fast-forward."""
        self._json(
            "PATCH",
            f"git/refs/heads/{self.branch}",
            json={"sha": commit_sha, "force": False},
        )

    # ------------------------------------------------------------------
    # Contents API
    # ------------------------------------------------------------------
    def get_content(self, path: str) -> Optional[RemoteFile]:
        """Return the file at path on the branch, or None if it does not exist."""
        response = self._request("GET", f"contents/{path}", params={"ref": self.branch})
        if response.status_code == 404:
            return None
        if response.is_error:
            raise RemoteError(
                f"GET contents/{path} returned {response.status_code}: {_error_message(response)}",
                status_code=response.status_code,
            )

        data = response.json()
        if isinstance(data, list) or data.get("type") != "file":
            raise RemoteError(f"{path} is not a file on {self.branch}")
        return RemoteFile(path=path, sha=data["sha"], content=base64.b64decode(data.get("content", "")))

    def put_content(self, path: str, content: bytes, message: str, sha: Optional[str] = None) -> str:
        """Create or replace a file; sha is required to replace.

        Returns:
            The commit sha created by the write
        """
        payload = {
            "message": message,
            "content": base64.b64encode(content).decode("ascii"),
            "branch": self.branch,
        }
        if sha:
            payload["sha"] = sha
        data = self._json("PUT", f"contents/{path}", json=payload)
        return data["commit"]["sha"]


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict):
        return data.get("message", response.text)
    return response.text
