"""Page-level policy around the normalization pipeline.

Responsibilities:
- Decide whether a page or an incoming edit is eligible for normalization.
- Apply the pipeline as a pre-save transform on incoming text.
- Normalize stored pages and save the result under the service account.
- Prevent edit loops: skip the service's own edits, reverts, and unchanged text.

Key types:
- `PageOutcome`: the result of processing one stored page.
- `NormalizationService`: policy glue between the pipeline and a page store.
"""

from __future__ import annotations

from dataclasses import dataclass

from .config import WikistyleConfig
from .errors import PipelineStageError
from .pipeline import WikitextNormalizer
from .site.mediawiki_client import MediaWikiApiError
from .site.pages import (
    EditFlags,
    PageRecord,
    PageStore,
    WIKITEXT_CONTENT_MODEL,
    normalize_user_name,
)
from .telemetry.logger import RunLogger

_API_FAILURE_HINTS = {
    "auth": "Store the bot password with `wikistyle credentials --set-password` and retry.",
    "identity_mismatch": "Log in as the configured `service_account`.",
    "timeout": "Retry later or raise the request timeout.",
    "transport": "Check network access to the configured `api_url`.",
    "http_error": "Verify `api_url` points at the wiki's `api.php`.",
    "invalid_response": "Verify `api_url` points at the wiki's `api.php`.",
}


@dataclass(frozen=True, slots=True)
class PageOutcome:
    """Result of processing one page.

    Attributes:
        title: Page title that was processed.
        status: `skipped`, `would-change`, or `saved`.
        reason: Skip reason when `status` is `skipped`.
        text: Normalized text when the page would change or was saved.
        changed_passes: Passes that changed the page text.
        revision_id: Revision id of the saved edit, when known.
    """

    title: str
    status: str
    reason: str | None = None
    text: str | None = None
    changed_passes: tuple[str, ...] = ()
    revision_id: int | None = None


class NormalizationService:
    """Apply normalization to incoming edits and stored pages."""

    def __init__(
        self,
        config: WikistyleConfig,
        normalizer: WikitextNormalizer | None = None,
        store: PageStore | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        self.config = config
        self.normalizer = (
            normalizer
            if normalizer is not None
            else WikitextNormalizer(config=config, run_logger=run_logger)
        )
        self.store = store
        self._run_logger = run_logger

    def is_service_account(self, author: str | None) -> bool:
        """Return whether `author` is the account that makes normalization edits."""

        if author is None:
            return False
        return normalize_user_name(author) == normalize_user_name(self.config.service_account)

    def pre_save_transform(
        self,
        text: str,
        *,
        namespace: int,
        content_model: str,
        author: str | None = None,
    ) -> str:
        """Normalize text about to be saved, or return it unchanged when ineligible."""

        if content_model != WIKITEXT_CONTENT_MODEL:
            return text
        if namespace not in self.config.eligible_namespaces:
            return text
        if self.is_service_account(author):
            return text
        return self.normalizer.normalize(text)

    def normalize_page(
        self,
        title: str,
        *,
        author: str | None = None,
        dry_run: bool = False,
    ) -> PageOutcome:
        """Normalize a stored page and save it when the text changes.

        Args:
            title: Page to process.
            author: Author of the edit that triggered processing. Defaults to the
                author of the latest revision.
            dry_run: Compute the outcome without saving.
        """

        store = self._require_store()
        page = self._fetch(store, title)
        if page is None:
            return self._skip(title, "missing")

        reason = self._skip_reason(page, author if author is not None else page.last_author)
        if reason is not None:
            return self._skip(page.title, reason)

        report = self.normalizer.normalize_with_report(page.text)
        if report.text == page.text:
            return self._skip(page.title, "unchanged")

        if dry_run:
            self._log_outcome("would-change", page.title)
            return PageOutcome(
                title=page.title,
                status="would-change",
                text=report.text,
                changed_passes=report.changed_passes,
            )

        revision_id = self._save(store, page, report.text)
        self._log_outcome("saved", page.title)
        return PageOutcome(
            title=page.title,
            status="saved",
            text=report.text,
            changed_passes=report.changed_passes,
            revision_id=revision_id,
        )

    def _skip_reason(self, page: PageRecord, author: str | None) -> str | None:
        """Return the first applicable skip reason for a fetched page."""

        if self.is_service_account(author):
            return "self-edit"
        if page.content_model != WIKITEXT_CONTENT_MODEL:
            return "content-model"
        if page.namespace not in self.config.eligible_namespaces:
            return "namespace"
        if page.is_redirect:
            return "redirect"
        if page.is_exempt:
            return "opt-out"
        if page.is_revert:
            return "revert"
        return None

    def _require_store(self) -> PageStore:
        if self.store is None:
            raise PipelineStageError(
                stage="fetch",
                detail="No page store is configured.",
                hint="Set `api_url` in the config file or pass `--api-url`.",
            )
        return self.store

    def _fetch(self, store: PageStore, title: str) -> PageRecord | None:
        """Fetch a page and map page-store failures to stage errors."""

        try:
            return store.fetch_page(title)
        except MediaWikiApiError as exc:
            raise self._stage_error("fetch", f"Failed to fetch `{title}`: {exc}", exc) from exc

    def _save(self, store: PageStore, page: PageRecord, text: str) -> int | None:
        """Save normalized text under the service account with loop-safe flags."""

        try:
            return store.save_page(
                page.title,
                text,
                identity=self.config.service_account,
                summary=self.config.edit_summary,
                flags=EditFlags(),
                base_revision_id=page.revision_id,
            )
        except MediaWikiApiError as exc:
            raise self._stage_error("save", f"Failed to save `{page.title}`: {exc}", exc) from exc

    @staticmethod
    def _stage_error(stage: str, detail: str, exc: MediaWikiApiError) -> PipelineStageError:
        return PipelineStageError(
            stage=stage,
            detail=detail,
            hint=_API_FAILURE_HINTS.get(exc.failure_kind),
        )

    def _skip(self, title: str, reason: str) -> PageOutcome:
        self._log_outcome("skipped", title, reason=reason)
        return PageOutcome(title=title, status="skipped", reason=reason)

    def _log_outcome(self, event: str, title: str, **context: object) -> None:
        if self._run_logger is not None:
            self._run_logger.log_event(event, "page", title=title, **context)
