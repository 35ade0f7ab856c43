"""Shared fixtures: an in-memory GitHub repository behind httpx.MockTransport."""

import base64
import hashlib
import json
import threading
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

import httpx
import pytest

from blog_publisher.sync.github import GitHubClient

OWNER = "solidspoon"
REPO = "blog"
BRANCH = "main"


def blob_sha(content: bytes) -> str:
    return hashlib.sha1(f"blob {len(content)}\0".encode("ascii") + content).hexdigest()


class FakeGitHub:
    """Just enough of the GitHub Git data and contents APIs for one branch."""

    def __init__(self, files: Optional[Dict[str, bytes]] = None):
        self.blobs: Dict[str, bytes] = {}
        self.trees: Dict[str, Dict[str, str]] = {}
        self.commits: Dict[str, Dict] = {}
        self.requests: List[Tuple[str, str]] = []
        self.fail: Set[Tuple[str, str]] = set()
        self.counter = 0
        self.lock = threading.Lock()

        tree_sha = self._store_tree({path: self._store_blob(c) for path, c in (files or {}).items()})
        self.head = self._store_commit(tree_sha, [], "initial")

    # -- object store -------------------------------------------------
    def _store_blob(self, content: bytes) -> str:
        sha = blob_sha(content)
        self.blobs[sha] = content
        return sha

    def _store_tree(self, entries: Dict[str, str]) -> str:
        sha = hashlib.sha1(json.dumps(sorted(entries.items())).encode()).hexdigest()
        self.trees[sha] = dict(entries)
        return sha

    def _store_commit(self, tree_sha: str, parents: List[str], message: str) -> str:
        self.counter += 1
        sha = hashlib.sha1(f"commit {self.counter}".encode()).hexdigest()
        self.commits[sha] = {"tree": tree_sha, "parents": parents, "message": message}
        return sha

    # -- inspection helpers -------------------------------------------
    def files(self) -> Dict[str, bytes]:
        tree = self.trees[self.commits[self.head]["tree"]]
        return {path: self.blobs[sha] for path, sha in tree.items()}

    def write_requests(self) -> List[Tuple[str, str]]:
        return [(m, p) for m, p in self.requests if m != "GET"]

    def push_external_commit(self, path: str, content: bytes) -> None:
        """Simulate someone else pushing to the branch."""
        entries = dict(self.trees[self.commits[self.head]["tree"]])
        entries[path] = self._store_blob(content)
        self.head = self._store_commit(self._store_tree(entries), [self.head], "external")

    # -- HTTP ---------------------------------------------------------
    def handle(self, request: httpx.Request) -> httpx.Response:
        with self.lock:
            return self._handle(request)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        prefix = f"/repos/{OWNER}/{REPO}/"
        path = request.url.path
        assert path.startswith(prefix), path
        endpoint = path[len(prefix):]
        self.requests.append((request.method, endpoint))

        for method, fail_prefix in self.fail:
            if request.method == method and endpoint.startswith(fail_prefix):
                return httpx.Response(500, json={"message": "Server Error"})

        body = json.loads(request.content) if request.content else {}

        if request.method == "GET" and endpoint == f"git/ref/heads/{BRANCH}":
            return httpx.Response(200, json={"object": {"sha": self.head, "type": "commit"}})

        if request.method == "GET" and endpoint.startswith("git/commits/"):
            commit = self.commits[endpoint.rsplit("/", 1)[1]]
            return httpx.Response(200, json={"sha": endpoint.rsplit("/", 1)[1], "tree": {"sha": commit["tree"]}})

        if request.method == "GET" and endpoint.startswith("git/trees/"):
            sha = endpoint.rsplit("/", 1)[1]
            entries = [
                {"path": p, "mode": "100644", "type": "blob", "sha": s}
                for p, s in sorted(self.trees[sha].items())
            ]
            return httpx.Response(200, json={"sha": sha, "tree": entries, "truncated": False})

        if request.method == "POST" and endpoint == "git/trees":
            entries = dict(self.trees[body["base_tree"]])
            for entry in body["tree"]:
                assert entry["mode"] == "100644" and entry["type"] == "blob"
                entries[entry["path"]] = self._store_blob(entry["content"].encode("utf-8"))
            return httpx.Response(201, json={"sha": self._store_tree(entries)})

        if request.method == "POST" and endpoint == "git/commits":
            sha = self._store_commit(body["tree"], body["parents"], body["message"])
            return httpx.Response(201, json={"sha": sha})

        if request.method == "PATCH" and endpoint == f"git/refs/heads/{BRANCH}":
            if body.get("force") or self.commits[body["sha"]]["parents"] != [self.head]:
                return httpx.Response(422, json={"message": "Update is not a fast forward"})
            self.head = body["sha"]
            return httpx.Response(200, json={"object": {"sha": self.head}})

        if endpoint.startswith("contents/"):
            return self._contents(request, endpoint[len("contents/"):], body)

        return httpx.Response(404, json={"message": "Not Found"})

    def _contents(self, request: httpx.Request, file_path: str, body: Dict) -> httpx.Response:
        tree = self.trees[self.commits[self.head]["tree"]]
        existing = tree.get(file_path)

        if request.method == "GET":
            if existing is None:
                return httpx.Response(404, json={"message": "Not Found"})
            encoded = base64.encodebytes(self.blobs[existing]).decode("ascii")
            return httpx.Response(200, json={"type": "file", "path": file_path, "sha": existing, "content": encoded})

        if request.method == "PUT":
            if existing is not None and body.get("sha") != existing:
                return httpx.Response(409, json={"message": f"{file_path} does not match"})
            if existing is None and body.get("sha"):
                return httpx.Response(422, json={"message": "sha given for a new file"})
            entries = dict(tree)
            entries[file_path] = self._store_blob(base64.b64decode(body["content"]))
            self.head = self._store_commit(self._store_tree(entries), [self.head], body["message"])
            return httpx.Response(201 if existing is None else 200, json={"commit": {"sha": self.head}})

        return httpx.Response(405, json={"message": "Method Not Allowed"})


@pytest.fixture
def fake_github():
    return FakeGitHub()


def client_for(fake: FakeGitHub) -> GitHubClient:
    return GitHubClient(
        token="test-token",
        owner=OWNER,
        repo=REPO,
        branch=BRANCH,
        transport=httpx.MockTransport(fake.handle),
    )


@pytest.fixture
def github_client(fake_github):
    client = client_for(fake_github)
    yield client
    client.close()


@pytest.fixture
def client_factory():
    return client_for


@pytest.fixture
def vault(tmp_path):
    """Empty vault directory; write notes with write_note()."""
    path = tmp_path / "vault"
    path.mkdir()
    return path


def write_note(directory: Path, title: str, frontmatter: str, body: str = "Content.\n") -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{title}.md"
    path.write_text(f"---\n{frontmatter}---\n{body}", encoding="utf-8")
    return path


@pytest.fixture
def note_writer():
    return write_note
