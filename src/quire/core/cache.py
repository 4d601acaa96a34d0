"""On-disk cache of converted Markdown bodies.

Each document gets two files named after its path without suffix:

    .cache/
    ├── pages/posts/spring-boot-paging.html   # converted body
    └── meta/posts/spring-boot-paging.json    # title, ToC, content hash

An entry is only served while its content hash matches the current body and
converter options. ``quire build --clean`` drops every entry.
"""

import hashlib
import json
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import TypedDict

PAGES_DIR = "pages"
META_DIR = "meta"
GITIGNORE = "# Ignore everything in this directory\n*\n"


class CachedMetadata(TypedDict):
    """Metadata stored next to a converted body."""

    title: str | None
    content_hash: str
    toc: list[dict[str, str | int]]


@dataclass
class CacheEntry:
    """A cached conversion."""

    html: str
    meta: CachedMetadata


def compute_content_hash(body: str, options_key: str) -> str:
    """SHA-256 of a Markdown body together with the converter options."""
    digest = hashlib.sha256()
    digest.update(options_key.encode())
    digest.update(b"\0")
    digest.update(body.encode())
    return digest.hexdigest()


class FileCache:
    """Conversion cache rooted at a directory."""

    def __init__(self, cache_dir: Path) -> None:
        self._cache_dir = cache_dir

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def get(self, key: str, content_hash: str) -> CacheEntry | None:
        """Look up a conversion.

        Args:
            key: Document path without suffix (e.g., "posts/spring-boot-paging")
            content_hash: Hash of the current body and options

        Returns:
            CacheEntry, or None on a miss, a stale hash or an unreadable entry
        """
        html_path, meta_path = self._paths(key)
        meta = _load_meta(meta_path)
        if meta is None or meta["content_hash"] != content_hash:
            return None

        try:
            html = html_path.read_text(encoding="utf-8")
        except OSError:
            return None
        return CacheEntry(html=html, meta=meta)

    def set(
        self,
        key: str,
        html: str,
        title: str | None,
        content_hash: str,
        toc: list[dict[str, str | int]],
    ) -> None:
        """Store a conversion, replacing any previous entry for the key."""
        if not self._cache_dir.exists():
            self._cache_dir.mkdir(parents=True)
            (self._cache_dir / ".gitignore").write_text(GITIGNORE, encoding="utf-8")

        html_path, meta_path = self._paths(key)
        for path in (html_path, meta_path):
            path.parent.mkdir(parents=True, exist_ok=True)

        meta: CachedMetadata = {"title": title, "content_hash": content_hash, "toc": toc}
        html_path.write_text(html, encoding="utf-8")
        meta_path.write_text(json.dumps(meta), encoding="utf-8")

    def clear(self) -> None:
        """Drop every entry, keeping the cache directory and its .gitignore."""
        for name in (PAGES_DIR, META_DIR):
            shutil.rmtree(self._cache_dir / name, ignore_errors=True)

    def _paths(self, key: str) -> tuple[Path, Path]:
        return (
            self._cache_dir / PAGES_DIR / f"{key}.html",
            self._cache_dir / META_DIR / f"{key}.json",
        )


def _load_meta(meta_path: Path) -> CachedMetadata | None:
    try:
        data = json.loads(meta_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return None

    if not isinstance(data, dict) or "content_hash" not in data or "toc" not in data:
        return None
    return CachedMetadata(
        title=data.get("title"),
        content_hash=data["content_hash"],
        toc=data["toc"],
    )
