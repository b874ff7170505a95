"""Markdown vault document store.

Reads a directory tree of markdown files whose front matter is a YAML
block at the top of the file:

    ---
    prev: "[[Previous note]]"
    aliases: [Intro]
    ---
    Body text...

Document ids are paths relative to the vault root, with forward slashes.
"""

from __future__ import annotations

import fnmatch
import logging
import os
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from ..config import ChainConfig
from ..exceptions import ConfigurationError, DocumentNotFoundError, DocumentStoreError
from .base import DocumentSnapshot, DocumentStore
from .links import LinkResolver, format_link

logger = logging.getLogger(__name__)

FRONT_MATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)


def split_front_matter(text: str) -> tuple[str | None, str]:
    """Split a markdown document into its YAML block and body.

    Returns:
        (yaml_text, body); yaml_text is None when there is no block
    """
    match = FRONT_MATTER_RE.match(text)
    if not match:
        return None, text
    return match.group(1), text[match.end():]


def parse_front_matter(text: str) -> dict[str, Any]:
    """Parse the front matter of a markdown document.

    Raises:
        yaml.YAMLError: If the block is not valid YAML
    """
    yaml_text, _ = split_front_matter(text)
    if yaml_text is None:
        return {}
    data = yaml.safe_load(yaml_text)
    return data if isinstance(data, dict) else {}


def render_document(front_matter: dict[str, Any], body: str) -> str:
    """Rebuild a markdown document from front matter and body."""
    if not front_matter:
        return body
    dumped = yaml.safe_dump(
        front_matter,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    return f"---\n{dumped}---\n{body}"


def _file_created_time(stat: os.stat_result) -> datetime:
    ts = getattr(stat, "st_birthtime", None) or stat.st_ctime
    return datetime.fromtimestamp(ts, tz=timezone.utc)


class MarkdownVaultStore(DocumentStore):
    """A document store over a directory of markdown files.

    Example:
        >>> store = MarkdownVaultStore("~/notes")
        >>> docs = await store.list_documents()
        >>> await store.rewrite_predecessor("b.md", "a.md")
    """

    def __init__(self, root: Path | str | None = None, config: ChainConfig | None = None):
        self.config = config or ChainConfig()
        root = root if root is not None else self.config.vault_root
        if root is None:
            raise ConfigurationError("MarkdownVaultStore needs a root directory")
        self.root = Path(root).expanduser()
        self._resolver: LinkResolver | None = None

    # =========================================================================
    # Paths
    # =========================================================================

    def _relative(self, file_path: Path) -> str:
        return file_path.relative_to(self.root).as_posix()

    def _absolute(self, path: str) -> Path:
        return self.root / Path(path)

    def _is_ignored(self, path: str) -> bool:
        return any(fnmatch.fnmatch(path, pattern) for pattern in self.config.ignore_patterns)

    def _scan_paths(self) -> list[str]:
        suffix = self.config.link_suffix or ".md"
        paths = []
        for file_path in sorted(self.root.rglob(f"*{suffix}")):
            if not file_path.is_file():
                continue
            path = self._relative(file_path)
            if not self._is_ignored(path):
                paths.append(path)
        return paths

    # =========================================================================
    # Reading
    # =========================================================================

    def _read_snapshot(self, path: str) -> DocumentSnapshot | None:
        file_path = self._absolute(path)
        try:
            text = file_path.read_text(encoding="utf-8")
            stat = file_path.stat()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise DocumentStoreError(f"Failed to read {path}", path=path, cause=e) from e

        try:
            front_matter = parse_front_matter(text)
        except yaml.YAMLError as e:
            logger.warning(f"Invalid front matter in {path}, treating as empty: {e}")
            front_matter = {}

        return DocumentSnapshot(
            path=path,
            front_matter=front_matter,
            created_time=_file_created_time(stat),
            predecessor_field=self.config.predecessor_field,
            aliases_field=self.config.aliases_field,
        )

    def _read_all(self) -> list[DocumentSnapshot]:
        snapshots = []
        for path in self._scan_paths():
            snapshot = self._read_snapshot(path)
            if snapshot is not None:
                snapshots.append(snapshot)
        return snapshots

    def _index(self, snapshots: list[DocumentSnapshot]) -> LinkResolver:
        return LinkResolver(
            [s.path for s in snapshots],
            {s.path: s.aliases for s in snapshots},
            suffix=self.config.link_suffix,
        )

    async def list_documents(self) -> list[DocumentSnapshot]:
        snapshots = self._read_all()
        self._resolver = self._index(snapshots)
        logger.debug(f"Read {len(snapshots)} documents from {self.root}")
        return snapshots

    async def get_document(self, path: str) -> DocumentSnapshot | None:
        if self._is_ignored(path):
            return None
        snapshot = self._read_snapshot(path)
        if self._resolver is not None:
            if snapshot is None:
                self._resolver.discard(path)
            else:
                self._resolver.add(path, snapshot.aliases)
        return snapshot

    def resolve_link(self, link: str, source_path: str | None = None) -> str | None:
        if self._resolver is None:
            self._resolver = self._index(self._read_all())

        resolved = self._resolver.resolve(link, source_path)
        if resolved is not None:
            return resolved

        # Created since the last scan
        suffix = self.config.link_suffix
        candidate = link if not suffix or link.endswith(suffix) else link + suffix
        if self._absolute(candidate).is_file() and not self._is_ignored(candidate):
            self._resolver.add(candidate)
            return candidate
        return None

    # =========================================================================
    # Writing
    # =========================================================================

    def _rewrite(self, path: str, predecessor: str | None) -> None:
        file_path = self._absolute(path)
        try:
            text = file_path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise DocumentNotFoundError(path, cause=e) from e
        except OSError as e:
            raise DocumentStoreError(f"Failed to read {path}", path=path, cause=e) from e

        yaml_text, body = split_front_matter(text)
        try:
            front_matter = yaml.safe_load(yaml_text) if yaml_text is not None else {}
        except yaml.YAMLError as e:
            raise DocumentStoreError(
                f"Refusing to rewrite {path}: invalid front matter", path=path, cause=e
            ) from e
        if not isinstance(front_matter, dict):
            front_matter = {}

        field = self.config.predecessor_field
        if predecessor is None:
            front_matter.pop(field, None)
        else:
            front_matter[field] = format_link(predecessor, self.config.link_suffix)

        try:
            file_path.write_text(render_document(front_matter, body), encoding="utf-8")
        except OSError as e:
            raise DocumentStoreError(f"Failed to write {path}", path=path, cause=e) from e

    async def rewrite_predecessor(self, path: str, predecessor: str | None) -> None:
        self._rewrite(path, predecessor)
        logger.debug(f"Rewrote {self.config.predecessor_field} of {path} -> {predecessor}")
