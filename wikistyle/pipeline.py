"""Orchestrator that runs the normalization passes in their fixed order.

Responsibilities:
- Normalize line endings and protect raw HTML islands before any pass runs.
- Run the enabled passes in canonical order as named, logged stages.
- Report which passes changed the document.

Key types:
- `WikitextNormalizer`: configured pass pipeline.
- `NormalizationReport`: normalized text plus the names of passes that changed it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from .config import NORMALIZATION_MODULES, WikistyleConfig
from .site.titles import NamespaceTitleResolver, TitleResolver
from .telemetry.logger import RunLogger
from .text import (
    CategoryNormalizer,
    LinkNormalizer,
    ListNormalizer,
    PlaceholderVault,
    RedirectProtection,
    ReferenceNormalizer,
    SectionNormalizer,
    SpacingNormalizer,
    TableNormalizer,
    TemplateNormalizer,
    WikitextRule,
    extract_spans,
    outermost_spans,
)

_StageResult = TypeVar("_StageResult")


@dataclass(frozen=True, slots=True)
class NormalizationReport:
    """Result of one normalization run.

    Attributes:
        text: Normalized document.
        changed_passes: Names of passes whose output differed from their input.
    """

    text: str
    changed_passes: tuple[str, ...] = ()

    @property
    def changed(self) -> bool:
        """Return whether any pass changed the document."""

        return bool(self.changed_passes)


class WikitextNormalizer:
    """Run the configured wikitext passes over whole documents."""

    PASS_ORDER = NORMALIZATION_MODULES

    def __init__(
        self,
        config: WikistyleConfig | None = None,
        title_resolver: TitleResolver | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        """Validate configuration and build one instance of every pass."""

        self.config = config if config is not None else WikistyleConfig()
        self.config.validate()
        resolver = title_resolver if title_resolver is not None else NamespaceTitleResolver()
        self._run_logger = run_logger
        self._passes: dict[str, WikitextRule] = {
            "templates": TemplateNormalizer(),
            "tables": TableNormalizer(),
            "links": LinkNormalizer(resolver),
            "references": ReferenceNormalizer(),
            "lists": ListNormalizer(RedirectProtection(self.config.redirect_protection)),
            "sections": SectionNormalizer(),
            "categories": CategoryNormalizer(),
            "spacing": SpacingNormalizer(resolver),
        }

    @property
    def active_passes(self) -> tuple[str, ...]:
        """Return enabled pass names in execution order."""

        enabled = set(self.config.enabled_modules)
        return tuple(name for name in self.PASS_ORDER if name in enabled)

    def normalize(self, text: str) -> str:
        """Return the normalized form of `text`."""

        return self.normalize_with_report(text).text

    def normalize_with_report(self, text: str) -> NormalizationReport:
        """Normalize `text` and record which passes changed it."""

        text = text.replace("\r\n", "\n").replace("\r", "\n")
        vault = PlaceholderVault(text)
        working = self._hide_protected_islands(text, vault)

        changed_passes: list[str] = []
        for name in self.active_passes:
            rule = self._passes[name]
            before = working
            working = self._run_stage(name, lambda: rule.apply(before))
            if working != before:
                changed_passes.append(name)

        return NormalizationReport(
            text=vault.restore(working),
            changed_passes=tuple(changed_passes),
        )

    def _hide_protected_islands(self, text: str, vault: PlaceholderVault) -> str:
        """Hide every balanced `<tag>...</tag>` island of the protected tags."""

        islands = outermost_spans(
            extract_spans(f"<{tag}>", f"</{tag}>", text) for tag in self.config.protected_tags
        )
        return vault.hide_spans(text, islands)

    def _on_stage_start(self, stage_name: str) -> None:
        if self._run_logger is not None:
            self._run_logger.log_stage_start(stage_name)

    def _on_stage_complete(self, stage_name: str) -> None:
        if self._run_logger is not None:
            self._run_logger.log_stage_complete(stage_name)

    def _on_stage_failure(self, stage_name: str, exc: Exception) -> None:
        """Emit stage-failure event with sanitized exception metadata."""

        if self._run_logger is not None:
            self._run_logger.log_stage_failure(stage_name, type(exc).__name__)

    def _run_stage(
        self,
        stage_name: str,
        action: Callable[[], _StageResult],
    ) -> _StageResult:
        """Run one named stage and emit start/complete/failure telemetry events."""

        self._on_stage_start(stage_name)
        try:
            result = action()
        except Exception as exc:
            self._on_stage_failure(stage_name, exc)
            raise
        self._on_stage_complete(stage_name)
        return result


def normalize_wikitext(text: str, config: WikistyleConfig | None = None) -> str:
    """Normalize `text` with a default-configured pipeline."""

    return WikitextNormalizer(config=config).normalize(text)
