"""Reference (`<ref>`) tag normalization pass.

Responsibilities:
- Canonicalize `name` attribute spacing and quoting.
- Collapse or drop empty references.
- Strip whitespace around tags and move refs behind trailing punctuation.
"""

from __future__ import annotations

import re

# Paired refs with plain-text content, or self-closing refs.
_REF_TAG = r"(?:<ref(?:\s[^>/]*)?>[^<]*</ref>|<ref\b[^>]*/>)"

_REFERENCE_RULES = (
    # <ref  name = "a"> -> <ref name="a">
    (re.compile(r"<ref +name *= *"), "<ref name="),
    # <ref name="a"/> -> <ref name="a" />
    (re.compile(r"<ref\b([^>]*[^\s/>])/>"), r"<ref\1 />"),
    # <ref name='a'> / <ref name=a> -> <ref name="a">
    (re.compile(r"<ref name=' *([^']+?) *'"), r'<ref name="\1"'),
    (re.compile(r"<ref name=([^\"'\s/>]+)"), r'<ref name="\1"'),
    # Whitespace right after an opening tag
    (re.compile(r"<ref\b([^>/]*)>[ \n]+"), r"<ref\1>"),
    # <ref name="a"></ref> -> <ref name="a" />
    (re.compile(r"<ref name=\"([^\"]+)\"></ref>"), r'<ref name="\1" />'),
    (re.compile(r"<ref></ref>"), ""),
    # Horizontal whitespace between text and opening or self-closing tags
    (re.compile(r"(?<=[^\s|!*#:;=])[ \t]+(<ref\b[^>/]*>)"), r"\1"),
    (re.compile(r"(?<=[^\s|!*#:;=])[ \t]+(<ref\b[^>]*/>)"), r"\1"),
    (re.compile(r"[ \n]+</ref>"), "</ref>"),
    # Text<ref>a</ref>. -> Text.<ref>a</ref>
    (re.compile(r"((?:" + _REF_TAG + r")+)([.,;:])"), r"\2\1"),
)


class ReferenceNormalizer:
    """Apply the ordered reference rewrite rules to the whole document."""

    def apply(self, text: str) -> str:
        """Normalize all `<ref>` tags in `text`."""

        for pattern, replacement in _REFERENCE_RULES:
            text = pattern.sub(replacement, text)
        return text
