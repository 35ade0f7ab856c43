"""Converge a remote branch to contain a set of output files.

Two modes are offered:

- AtomicSync (default): one tree, one commit, one fast-forward ref update.
  Either every changed file lands or the branch is left untouched.
- PerFileSync: one contents-API write per changed file, concurrently.
  Not atomic; each file succeeds or fails on its own.

Both skip files whose remote content already matches.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Protocol

from blog_publisher.core.config import PublisherConfig
from blog_publisher.core.exceptions import (
    ConfigurationError,
    PublishCancelled,
    RemoteConflictError,
    RemoteError,
    RemoteWriteError,
)
from blog_publisher.core.models import (
    FileOutcome,
    OutputFile,
    RemoteTreeState,
    SyncResult,
    SyncStatus,
)
from blog_publisher.sync.github import GitHubClient

logger = logging.getLogger(__name__)

FILE_MODE = "100644"
CONFLICT_STATUSES = (409, 422)


class SyncEngine(Protocol):
    atomic: bool

    def sync(self, outputs: List[OutputFile], cancel: Optional[threading.Event] = None) -> SyncResult:
        """Converge the branch and report per-file outcomes."""

    def close(self) -> None:
        """Release the underlying HTTP client."""


def _cancelled(cancel: Optional[threading.Event]) -> bool:
    return cancel is not None and cancel.is_set()


class AtomicSync:
    """Publishes all changed files in a single commit."""

    atomic = True

    def __init__(self, client: GitHubClient, commit_message: Optional[str] = None):
        self.client = client
        self.commit_message = commit_message

    def close(self) -> None:
        self.client.close()

    def read_state(self) -> RemoteTreeState:
        """Read the branch head, its root tree and every blob on it."""
        head_sha = self.client.get_ref()
        commit = self.client.get_commit(head_sha)
        tree_sha = commit["tree"]["sha"]
        tree = self.client.get_tree(tree_sha)
        if tree.get("truncated"):
            logger.warning("Remote tree listing is truncated; unlisted files will be rewritten")

        blobs = {
            entry["path"]: entry["sha"]
            for entry in tree.get("tree", [])
            if entry.get("type") == "blob"
        }
        return RemoteTreeState(head_sha=head_sha, tree_sha=tree_sha, blobs=blobs)

    def sync(self, outputs: List[OutputFile], cancel: Optional[threading.Event] = None) -> SyncResult:
        """Commit every changed output on top of the current branch head.

        Raises:
            RemoteConflictError: If the branch moved while the commit was prepared
            PublishCancelled: If cancel was set before the ref update
        """
        if _cancelled(cancel):
            raise PublishCancelled("Sync cancelled before reading the remote branch")

        changed = list(outputs)
        try:
            state = self.read_state()
            changed = [o for o in outputs if state.blob_sha(o.path) != o.blob_sha]
            logger.debug("%d of %d files changed", len(changed), len(outputs))

            if not changed:
                logger.info("Remote branch already up to date")
                return self._result(outputs, changed, None, state.head_sha)

            entries = [
                {
                    "path": o.path,
                    "mode": FILE_MODE,
                    "type": "blob",
                    "content": o.content.decode("utf-8"),
                }
                for o in changed
            ]
            tree_sha = self.client.create_tree(state.tree_sha, entries)
            message = self.commit_message or f"Update {len(changed)} files"
            commit_sha = self.client.create_commit(message, tree_sha, state.head_sha)

            if _cancelled(cancel):
                raise PublishCancelled("Sync cancelled before updating the branch")

            try:
                self.client.update_ref(commit_sha)
            except RemoteError as e:
                if e.status_code in CONFLICT_STATUSES:
                    raise RemoteConflictError(
                        f"Branch {self.client.branch} moved during publish; nothing was changed",
                        status_code=e.status_code,
                    ) from e
                raise
        except RemoteConflictError:
            raise
        except RemoteError as e:
            logger.warning("Atomic sync failed, branch left untouched: %s", e)
            return self._result(outputs, changed, str(e), None)

        for output in changed:
            logger.info("Published: %s", output.path)
        return self._result(outputs, changed, None, commit_sha)

    def _result(
        self,
        outputs: List[OutputFile],
        changed: List[OutputFile],
        error: Optional[str],
        commit_sha: Optional[str],
    ) -> SyncResult:
        changed_paths = {o.path for o in changed}
        outcomes = []
        for output in outputs:
            if output.path not in changed_paths:
                outcomes.append(FileOutcome(output.path, SyncStatus.SKIPPED))
            elif error is not None:
                outcomes.append(FileOutcome(output.path, SyncStatus.FAILED, error))
            else:
                outcomes.append(FileOutcome(output.path, SyncStatus.WRITTEN))
        return SyncResult(tuple(outcomes), commit_sha=commit_sha, atomic=True)


class PerFileSync:
    """Writes each changed file on its own. Not atomic."""

    atomic = False

    def __init__(
        self,
        client: GitHubClient,
        commit_message: Optional[str] = None,
        max_workers: int = 4,
    ):
        self.client = client
        self.commit_message = commit_message
        self.max_workers = max(1, max_workers)

    def close(self) -> None:
        self.client.close()

    def sync(self, outputs: List[OutputFile], cancel: Optional[threading.Event] = None) -> SyncResult:
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            outcomes = list(pool.map(lambda output: self.sync_file(output, cancel), outputs))
        return SyncResult(tuple(outcomes), atomic=False)

    def sync_file(self, output: OutputFile, cancel: Optional[threading.Event] = None) -> FileOutcome:
        if _cancelled(cancel):
            return FileOutcome(output.path, SyncStatus.FAILED, "Cancelled")

        try:
            return self._converge(output)
        except RemoteWriteError as e:
            logger.warning("Failed to publish %s: %s", output.path, e)
            return FileOutcome(output.path, SyncStatus.FAILED, str(e))
        except Exception as e:
            # Confined to this file; the other outcomes still stand
            logger.exception("Unexpected error publishing %s", output.path)
            return FileOutcome(output.path, SyncStatus.FAILED, f"Unexpected error: {e}")

    def _converge(self, output: OutputFile) -> FileOutcome:
        try:
            existing = self.client.get_content(output.path)
            if existing is not None and existing.content == output.content:
                logger.debug("Unchanged: %s", output.path)
                return FileOutcome(output.path, SyncStatus.SKIPPED)

            message = self.commit_message or f"Update {output.path}"
            self.client.put_content(
                output.path,
                output.content,
                message,
                sha=existing.sha if existing is not None else None,
            )
        except RemoteError as e:
            raise RemoteWriteError(str(e), status_code=e.status_code) from e

        logger.info("Published: %s", output.path)
        return FileOutcome(output.path, SyncStatus.WRITTEN)


def create_sync_engine(config: PublisherConfig, client: Optional[GitHubClient] = None) -> SyncEngine:
    """Build the configured sync engine.

    Raises:
        ConfigurationError: If credentials or repository are missing
    """
    config.require_remote()
    client = client or GitHubClient(
        token=config.token,
        owner=config.owner,
        repo=config.repo,
        branch=config.branch,
        timeout=config.timeout,
    )

    if config.sync_mode == "atomic":
        return AtomicSync(client, config.commit_message)
    if config.sync_mode == "per-file":
        return PerFileSync(client, config.commit_message, config.max_workers)
    raise ConfigurationError(f"Unknown sync mode: {config.sync_mode}")
