"""Publish orchestration: documents in, site and remote branch out."""

import logging
import threading
from typing import List, Optional

from blog_publisher.core.config import PublisherConfig
from blog_publisher.core.exceptions import DocumentError, PublisherError, ValidationError
from blog_publisher.core.extractor import ItemExtractor
from blog_publisher.core.models import MetadataUpdate, NoteError, PublishResult
from blog_publisher.core.store import DocumentStore, VaultStore
from blog_publisher.core.validator import validate
from blog_publisher.render.site import SiteRenderer, stage
from blog_publisher.sync.engine import SyncEngine, create_sync_engine
from blog_publisher.transforms import frontmatter

logger = logging.getLogger(__name__)


class Publisher:
    """Runs the publish pipeline.

    extract -> persist identifiers/dates -> validate -> render -> stage
    -> sync (optional). Soft errors end up in the result's failures;
    fatal errors end the run and become result.error.
    """

    def __init__(
        self,
        config: PublisherConfig,
        store: DocumentStore,
        extractor: Optional[ItemExtractor] = None,
        renderer: Optional[SiteRenderer] = None,
        sync_engine: Optional[SyncEngine] = None,
    ):
        """Initialize Publisher.

        Args:
            config: Run configuration
            store: Source of documents, also receives metadata write-backs
            extractor: Item extractor (default: built from config and store)
            renderer: Site renderer (default: bundled templates)
            sync_engine: Remote sync (default: built from config on first push)
        """
        self.config = config
        self.store = store
        self.extractor = extractor or ItemExtractor(
            store,
            tag=config.publish_tag,
            max_workers=config.max_workers,
        )
        self.renderer = renderer or SiteRenderer(
            description=config.description,
            site_title=config.site_title,
        )
        self.sync_engine = sync_engine

    def publish(
        self,
        push: Optional[bool] = None,
        cancel: Optional[threading.Event] = None,
    ) -> PublishResult:
        """Publish every tagged document.

        Args:
            push: Sync to the remote after staging (default: config.push)
            cancel: Set to abort the sync before the branch is updated

        Returns:
            PublishResult; never raises for pipeline errors
        """
        push = self.config.push if push is None else push
        result = PublishResult()

        try:
            self._run(result, push, cancel)
        except ValidationError as e:
            result.collisions = e.collisions
            result.error = str(e)
        except PublisherError as e:
            result.error = str(e)
        except Exception as e:
            logger.exception("Publish failed")
            result.error = f"Unexpected error: {e}"

        if result.error is not None:
            logger.error("Publish aborted: %s", result.error)
        return result

    def _run(self, result: PublishResult, push: bool, cancel: Optional[threading.Event]) -> None:
        # Check remote settings before touching anything
        if not push:
            self._build(result, None, cancel)
            return

        if self.sync_engine is not None:
            self.config.require_remote()
            self._build(result, self.sync_engine, cancel)
            return

        # Engines built here own their HTTP client for this run only
        engine = create_sync_engine(self.config)
        try:
            self._build(result, engine, cancel)
        finally:
            engine.close()

    def _build(
        self,
        result: PublishResult,
        engine: Optional[SyncEngine],
        cancel: Optional[threading.Event],
    ) -> None:
        extraction = self.extractor.extract()
        result.failures.extend(extraction.diagnostics)

        for update in extraction.updates:
            error = self._persist(update)
            if error is not None:
                result.failures.append(error)

        validation = validate(extraction.items)
        if not validation.ok:
            result.failures.extend(validation.diagnostics())
            validation.raise_for_collisions()

        if not extraction.items:
            result.message = f"No documents tagged '{self.config.publish_tag}' to publish."
            logger.info(result.message)
            return

        outputs = self.renderer.render(extraction.items)
        result.output_paths = [output.path for output in outputs]
        result.published_titles = [item.title for item in extraction.items]
        result.staged_paths = stage(outputs, self.config.output_dir)

        if engine is None:
            return

        result.sync = engine.sync(outputs, cancel=cancel)
        result.pushed = True
        if not result.sync.success:
            failed = ", ".join(o.path for o in result.sync.failed)
            logger.warning("Some files failed to publish: %s", failed)

    def _persist(self, update: MetadataUpdate) -> Optional[NoteError]:
        """Write a metadata patch back into its document."""
        document = update.context
        try:
            text = self.store.read(document)
            self.store.write(document, frontmatter.merge(text, update.patch))
        except (DocumentError, OSError) as e:
            logger.warning("Failed to update metadata of %s: %s", document.path.name, e)
            return NoteError(path=document.path, error=str(e), kind="persist", title=document.title)

        logger.info("Updated metadata of %s: %s", document.path.name, ", ".join(update.patch))
        return None


def create_publisher_from_config(config: PublisherConfig) -> Publisher:
    """Create a Publisher over the configured vault."""
    store = VaultStore(config.vault_path, source_dirs=config.source_dirs or None)
    return Publisher(config, store)
