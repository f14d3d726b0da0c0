"""Category link relocation pass.

Responsibilities:
- Collect `[[Category:...]]` links outside templates, deduplicated in order.
- Move them to the end of the document, one per line after a blank line.
"""

from __future__ import annotations

from collections.abc import Iterable
import re

from .extract import extract_spans
from .vault import PlaceholderVault


class CategoryNormalizer:
    """Relocate category links to the document end."""

    def __init__(self, namespace_names: Iterable[str] = ("Category",)) -> None:
        """Initialize with the localized names of the category namespace.

        The first name is used when writing the relocated links back.
        """

        names = [name.strip() for name in namespace_names if name.strip()]
        if not names:
            raise ValueError("At least one category namespace name is required.")
        self.canonical_name = names[0]
        alternatives = "|".join(re.escape(name).replace(r"\ ", "[ _]") for name in names)
        self._category_re = re.compile(
            r"(?P<lead>\n*)(?P<pad>[ \t]*)\[\[[ \t]*(?:"
            + alternatives
            + r")[ \t]*:[ \t]*(?P<name>[^\[\]\n]+?)[ \t]*\]\](?P<trail>[ \t]*)(?P<eol>\n?)",
            re.IGNORECASE,
        )

    def apply(self, text: str) -> str:
        """Move all category links in `text` to its end."""

        vault = PlaceholderVault(text)
        hidden = vault.hide_spans(text, extract_spans("{{", "}}", text))

        names: list[str] = []

        def _collect(match: re.Match[str]) -> str:
            name = match.group("name")
            if name not in names:
                names.append(name)
            source = match.string
            previous = source[match.start() - 1 : match.start()]
            starts_line = bool(match.group("lead")) or previous in {"", "\n"}
            if starts_line:
                # Trailing links take the blank lines before them along.
                if match.end() == len(source):
                    return ""
                return match.group("lead")
            return (match.group("pad") if match.group("trail") else "") + match.group("eol")

        hidden = self._category_re.sub(_collect, hidden)
        if not names:
            return text

        links = "\n".join(f"[[{self.canonical_name}:{name}]]" for name in names)
        body = vault.restore(hidden).rstrip()
        if not body:
            return links
        return f"{body}\n\n{links}"
