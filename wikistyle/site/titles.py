"""Page-title resolution used to classify links.

Responsibilities:
- Define the resolver protocol the link and spacing passes depend on.
- Provide an offline resolver based on namespace names and title validity rules.

Key types:
- `ResolvedTitle`: namespace, prefix-free text, and fragment of a parsed title.
- `TitleResolver`: protocol for `resolve(raw_title) -> ResolvedTitle | None`.
- `NamespaceTitleResolver`: offline implementation with English namespace names.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import re
from typing import Protocol

FILE_NAMESPACE = 6
CATEGORY_NAMESPACE = 14

DEFAULT_NAMESPACES: Mapping[str, int] = {
    "media": -2,
    "special": -1,
    "talk": 1,
    "user": 2,
    "user talk": 3,
    "project": 4,
    "project talk": 5,
    "file": 6,
    "image": 6,
    "file talk": 7,
    "image talk": 7,
    "mediawiki": 8,
    "mediawiki talk": 9,
    "template": 10,
    "template talk": 11,
    "help": 12,
    "help talk": 13,
    "category": 14,
    "category talk": 15,
}

_ILLEGAL_TITLE_RE = re.compile(r"[<>\[\]|{}\x00-\x1f\x7f\ufffd]|~{3}")
_RELATIVE_TITLE_RE = re.compile(r"^\.\.?(?:/|$)|/\.\.?(?:/|$)")
_MAX_TITLE_BYTES = 255


@dataclass(frozen=True, slots=True)
class ResolvedTitle:
    """A parsed page title.

    Attributes:
        namespace: Namespace number (0 for the main namespace).
        text: Title text without the namespace prefix.
        fragment: Section fragment after `#`, or an empty string.
    """

    namespace: int
    text: str
    fragment: str = ""


class TitleResolver(Protocol):
    """Protocol for turning raw title strings into namespaced titles."""

    def resolve(self, raw_title: str) -> ResolvedTitle | None:
        """Return the parsed title, or `None` when the title is not valid."""


class NamespaceTitleResolver:
    """Resolve titles offline from a namespace-name table."""

    def __init__(self, namespaces: Mapping[str, int] | None = None) -> None:
        """Initialize with lowercase namespace names mapped to namespace numbers."""

        source = DEFAULT_NAMESPACES if namespaces is None else namespaces
        self.namespaces = {
            " ".join(name.replace("_", " ").split()).lower(): number
            for name, number in source.items()
        }

    def resolve(self, raw_title: str) -> ResolvedTitle | None:
        """Parse `raw_title` into namespace, text, and fragment."""

        title = raw_title.replace("_", " ").strip()
        if title.startswith(":"):
            title = title[1:].strip()

        name, _, fragment = title.partition("#")
        name = name.strip()
        if not name and not fragment:
            return None
        if _ILLEGAL_TITLE_RE.search(name) or _RELATIVE_TITLE_RE.search(name):
            return None
        if len(name.encode("utf-8")) > _MAX_TITLE_BYTES:
            return None

        namespace = 0
        prefix, separator, rest = name.partition(":")
        if separator:
            key = " ".join(prefix.split()).lower()
            if key in self.namespaces:
                namespace = self.namespaces[key]
                name = rest.strip()
                if not name:
                    return None
        return ResolvedTitle(namespace=namespace, text=name, fragment=fragment.strip())
