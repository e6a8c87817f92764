"""Offline cache for the game's static assets.

Assets live on disk under ``<root>/<version>/``. Requests are served cache
first, then from the network source (repopulating the cache), then from the
designated offline fallback. Nothing here touches simulation state.
"""

from __future__ import annotations

import logging
import os
import shutil
import urllib.parse
import urllib.request
from pathlib import Path
from typing import Callable

from .config import CACHE_VERSION

logger = logging.getLogger(__name__)

ASSETS: tuple[str, ...] = (
    "icon-192.png",
    "icon-512.png",
    "offline.png",
)
OFFLINE_FALLBACK = "offline.png"
ASSET_URL_ENV = "FLAPPY_ASSET_URL"
USER_AGENT = "Flappy/1.0"

Fetcher = Callable[[str], bytes]


class AssetUnavailable(Exception):
    """Neither the cache, the network nor the offline fallback could serve an asset."""


def url_fetcher(base_url: str, timeout: float = 10.0) -> Fetcher:
    """Build a fetcher that downloads ``<base_url>/<name>``."""
    base = base_url if base_url.endswith("/") else base_url + "/"

    def fetch(name: str) -> bytes:
        url = urllib.parse.urljoin(base, urllib.parse.quote(name))
        req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            return resp.read()

    return fetch


def default_cache_root() -> Path:
    home = os.environ.get("FLAPPY_HOME")
    base = Path(home) if home else Path.home() / ".flappy"
    return base / "cache"


class AssetCache:
    """Versioned on-disk cache in front of an optional network source."""

    def __init__(
        self,
        root: Path | str | None = None,
        fetcher: Fetcher | None = None,
        version: str = CACHE_VERSION,
        assets: tuple[str, ...] = ASSETS,
        fallback: str | None = OFFLINE_FALLBACK,
    ) -> None:
        self.root = Path(root) if root is not None else default_cache_root()
        if fetcher is None:
            base_url = os.environ.get(ASSET_URL_ENV)
            fetcher = url_fetcher(base_url) if base_url else None
        self.fetcher = fetcher
        self.version = version
        self.assets = assets
        self.fallback = fallback

    @property
    def directory(self) -> Path:
        return self.root / self.version

    def install(self) -> None:
        """Fetch and store the whole asset list, or store nothing at all."""
        if self.fetcher is None:
            raise AssetUnavailable("no network source configured")
        fetched: dict[str, bytes] = {}
        for name in self.assets:
            try:
                fetched[name] = self.fetcher(name)
            except Exception as e:
                raise AssetUnavailable(f"install failed on {name}: {e}") from e
        created: list[Path] = []
        try:
            for name, data in fetched.items():
                is_new = not (self.directory / name).exists()
                path = self._write(name, data)
                if is_new:
                    created.append(path)
        except OSError as e:
            for path in created:
                path.unlink(missing_ok=True)
            raise AssetUnavailable(f"install could not write to {self.directory}: {e}") from e
        logger.info(f"Installed {len(fetched)} assets into {self.directory}")

    def activate(self) -> list[str]:
        """Delete caches left behind by other versions. Returns their names."""
        removed: list[str] = []
        if not self.root.is_dir():
            return removed
        for entry in self.root.iterdir():
            if entry.is_dir() and entry.name != self.version:
                shutil.rmtree(entry, ignore_errors=True)
                removed.append(entry.name)
        if removed:
            logger.info(f"Removed stale asset caches: {', '.join(sorted(removed))}")
        return removed

    def cached(self, name: str) -> bytes | None:
        path = self.directory / name
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Unreadable cached asset {path}: {e}")
            return None

    def fetch(self, name: str) -> bytes:
        data = self.cached(name)
        if data is not None:
            return data
        if self.fetcher is not None:
            try:
                data = self.fetcher(name)
            except Exception as e:
                logger.warning(f"Fetching {name} failed: {e}")
            else:
                self._store(name, data)
                return data
        if self.fallback is not None and self.fallback != name:
            data = self.cached(self.fallback)
            if data is not None:
                logger.debug(f"Serving offline fallback for {name}")
                return data
        raise AssetUnavailable(name)

    def _write(self, name: str, data: bytes) -> Path:
        path = self.directory / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    def _store(self, name: str, data: bytes) -> None:
        try:
            self._write(name, data)
        except OSError as e:
            logger.warning(f"Could not cache {name}: {e}")
