"""Internal link (`[[...]]`) normalization pass.

Responsibilities:
- Canonicalize link titles (trim, percent-decode, underscores to spaces).
- Collapse redundant aliases and file-link parameters.
- Rewrite mistakenly double-bracketed external links to single brackets.

Key types:
- `LinkNormalizer`: the pass itself, backed by a `TitleResolver`.
"""

from __future__ import annotations

import re

from ..site.titles import FILE_NAMESPACE, CATEGORY_NAMESPACE, NamespaceTitleResolver, TitleResolver
from .extract import extract_spans, outermost_spans, rewrite_spans
from .vault import PlaceholderVault

_EXTERNAL_URL_RE = re.compile(r"^\s*(?:https?|ftps?)://", re.IGNORECASE)
_PERCENT_RUN_RE = re.compile(r"(?:%[0-9A-Fa-f]{2})+")
_THUMB_PAIRS = (("thumb", "right"), ("right", "thumb"))


def percent_decode(value: str) -> str:
    """Decode `%XX` escapes as UTF-8, leaving runs that are not valid UTF-8 verbatim."""

    def _decode(match: re.Match[str]) -> str:
        raw = bytes.fromhex(match.group(0).replace("%", ""))
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            return match.group(0)

    return _PERCENT_RUN_RE.sub(_decode, value)


def _capitalize_first(value: str) -> str:
    return value[:1].upper() + value[1:]


def _lowercase_first(value: str) -> str:
    return value[:1].lower() + value[1:]


class LinkNormalizer:
    """Rebuild every top-level internal link in canonical form."""

    def __init__(self, title_resolver: TitleResolver | None = None) -> None:
        """Initialize with a title resolver used to detect file links."""

        self.title_resolver = title_resolver or NamespaceTitleResolver()

    def apply(self, text: str) -> str:
        """Normalize all top-level links in `text`."""

        return rewrite_spans(text, extract_spans("[[", "]]", text), self.fix_link)

    def fix_link(self, link: str) -> str:
        """Return the canonical form of one `[[...]]` span, or the span unchanged."""

        body = link[2:-2]
        vault = PlaceholderVault(body)
        nested = outermost_spans([extract_spans("{{", "}}", body), extract_spans("[[", "]]", body)])
        body = vault.hide_spans(body, nested)

        parts = body.split("|")
        if _EXTERNAL_URL_RE.match(parts[0]):
            return "[" + vault.restore(body.replace("|", " ", 1).strip()) + "]"

        title = percent_decode(parts[0].strip()).replace("_", " ")
        params = parts[1:]
        resolved = self.title_resolver.resolve(title)
        if resolved is None:
            return link

        if resolved.namespace == FILE_NAMESPACE:
            rebuilt = self._file_link(title, params, vault)
        elif resolved.namespace == CATEGORY_NAMESPACE and params:
            rebuilt = vault.restore("|".join([title, *params]))
        elif params:
            rebuilt = vault.restore(self._aliased_link(title, "|".join(params)))
        else:
            rebuilt = vault.restore(title)
        return f"[[{rebuilt}]]"

    def _file_link(self, title: str, params: list[str], vault: PlaceholderVault) -> str:
        """Rebuild a file link with trimmed parameters and nested links normalized."""

        cleaned = [self.apply(vault.restore(param.strip())) for param in params]
        cleaned = [param for param in cleaned if param.replace(" ", "") != "alt="]

        collapsed: list[str] = []
        for param in cleaned:
            if collapsed and (collapsed[-1], param) in _THUMB_PAIRS:
                collapsed[-1] = "thumb"
                continue
            collapsed.append(param)
        return "|".join([vault.restore(title), *collapsed])

    @staticmethod
    def _aliased_link(title: str, alias: str) -> str:
        """Rebuild `[[title|alias]]`, collapsing aliases that repeat the title."""

        alias = alias.strip()
        title = _capitalize_first(title)
        if alias and alias in {title, _lowercase_first(title)}:
            return alias
        return f"{title}|{alias}"
