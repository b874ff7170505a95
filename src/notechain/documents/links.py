"""Predecessor declarations and link resolution.

A predecessor declaration is the raw front matter value naming the
document(s) a note follows. It may be:

- absent (None)
- a single wikilink string: "[[Meeting notes]]"
- a list of wikilinks: ["[[A]]", "[[B]]"]
- a bare name: "Meeting notes"

Unquoted wikilinks in YAML (prev: [[A]]) parse as nested lists, so a
nested list of strings is read the same way as the quoted form.

Link text may carry a display part ("[[A|shown]]") or a heading
("[[A#Section]]"); both are stripped before resolution.
"""

from __future__ import annotations

import logging
import posixpath
import re
from collections import defaultdict
from typing import Any, Iterable, Mapping

logger = logging.getLogger(__name__)

WIKILINK_RE = re.compile(r"\[\[([^\]]+)\]\]")


def _clean_link_text(text: str) -> str:
    text = text.split("|", 1)[0]
    text = text.split("#", 1)[0]
    return text.strip()


def _links_from_value(value: Any) -> list[str]:
    if isinstance(value, str):
        matches = WIKILINK_RE.findall(value)
        if matches:
            return [_clean_link_text(m) for m in matches]
        return [_clean_link_text(value)]
    if isinstance(value, (list, tuple)):
        # YAML reads an unquoted [[A]] as [["A"]]
        links = []
        for item in value:
            links.extend(_links_from_value(item))
        return links
    return []


def parse_predecessor_declaration(value: Any) -> list[str]:
    """Extract link texts from a predecessor declaration.

    Args:
        value: Raw front matter value (None, str, or list)

    Returns:
        Link texts in declaration order; non-string and empty entries
        are ignored
    """
    if value is None:
        return []

    items = value if isinstance(value, (list, tuple)) else [value]
    links: list[str] = []
    for item in items:
        for link in _links_from_value(item):
            if link:
                links.append(link)
            else:
                logger.debug(f"Ignoring empty link in declaration {value!r}")
    return links


def strip_suffix(path: str, suffix: str) -> str:
    """Remove the document suffix from a path, if present."""
    if suffix and path.endswith(suffix):
        return path[: -len(suffix)]
    return path


def format_link(path: str, suffix: str = ".md") -> str:
    """Format a document path as a wikilink declaration value.

    >>> format_link("threads/Intro.md")
    '[[threads/Intro]]'
    """
    return f"[[{strip_suffix(path, suffix)}]]"


def placeholder_id(link: str, suffix: str = ".md") -> str:
    """Identifier for a link that resolves to no document yet."""
    if suffix and link.endswith(suffix):
        return link
    return f"{link}{suffix}"


class LinkResolver:
    """Resolves link texts to document paths.

    Resolution order:
    1. Exact path ("notes/A.md")
    2. Path plus suffix ("notes/A" -> "notes/A.md")
    3. Path relative to the linking document's folder
    4. Unique basename, case-insensitive ("a" -> "notes/A.md"); when
       several documents share the basename, the one in the linking
       document's folder wins, otherwise the shortest path
    5. Alias, case-insensitive

    Example:
        >>> resolver = LinkResolver(["notes/A.md", "B.md"], {"B.md": ["Bee"]})
        >>> resolver.resolve("A")
        'notes/A.md'
        >>> resolver.resolve("bee")
        'B.md'
    """

    def __init__(
        self,
        paths: Iterable[str] = (),
        aliases: Mapping[str, list[str] | None] | None = None,
        suffix: str = ".md",
    ):
        self.suffix = suffix
        self._paths: set[str] = set()
        self._by_basename: dict[str, list[str]] = defaultdict(list)
        self._by_alias: dict[str, str] = {}

        aliases = aliases or {}
        for path in paths:
            self.add(path, aliases.get(path))

    def add(self, path: str, aliases: list[str] | None = None) -> None:
        """Index a document path and its aliases."""
        if path not in self._paths:
            self._paths.add(path)
            key = self._basename_key(path)
            self._by_basename[key].append(path)
        for alias in aliases or []:
            self._by_alias.setdefault(alias.lower(), path)

    def discard(self, path: str) -> None:
        """Remove a document path and its aliases from the index."""
        if path not in self._paths:
            return
        self._paths.discard(path)
        key = self._basename_key(path)
        if path in self._by_basename.get(key, []):
            self._by_basename[key].remove(path)
        for alias in [a for a, p in self._by_alias.items() if p == path]:
            del self._by_alias[alias]

    def _basename_key(self, path: str) -> str:
        return strip_suffix(posixpath.basename(path), self.suffix).lower()

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __call__(self, link: str, source_path: str | None = None) -> str | None:
        return self.resolve(link, source_path)

    def resolve(self, link: str, source_path: str | None = None) -> str | None:
        """Resolve a link text to a document path.

        Args:
            link: Link text without brackets
            source_path: Path of the document containing the link

        Returns:
            The resolved path, or None if no document matches
        """
        link = link.strip()
        if not link:
            return None

        candidates = [link]
        if self.suffix and not link.endswith(self.suffix):
            candidates.append(link + self.suffix)
        for candidate in candidates:
            if candidate in self._paths:
                return candidate

        source_dir = posixpath.dirname(source_path) if source_path else ""
        if source_dir:
            for candidate in candidates:
                relative = posixpath.normpath(posixpath.join(source_dir, candidate))
                if relative in self._paths:
                    return relative

        if "/" not in link:
            matches = self._by_basename.get(strip_suffix(link, self.suffix).lower(), [])
            if len(matches) == 1:
                return matches[0]
            if matches:
                same_dir = [m for m in matches if posixpath.dirname(m) == source_dir]
                if same_dir:
                    return same_dir[0]
                return min(matches, key=lambda m: (len(m), m))

        return self._by_alias.get(link.lower())
