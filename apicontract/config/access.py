"""Process-local config cache that notices edits to the config file."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path

from apicontract.config.loader import get_config_path, load_config
from apicontract.config.schema import ApiContractConfig


@dataclass(slots=True)
class _CachedConfig:
    config: ApiContractConfig
    mtime: float | None


_lock = threading.RLock()
_cache: dict[Path, _CachedConfig] = {}


def _resolve(config_path: Path | None) -> Path:
    return Path(config_path or get_config_path()).expanduser().resolve()


def _mtime(path: Path) -> float | None:
    try:
        return path.stat().st_mtime
    except FileNotFoundError:
        return None


def get_config(*, config_path: Path | None = None, force_reload: bool = False) -> ApiContractConfig:
    """Return the config for ``config_path`` (default file when omitted).

    The cached value is reused until the file's modification time changes,
    the file appears or disappears, or ``force_reload`` is set.
    """
    path = _resolve(config_path)
    with _lock:
        cached = _cache.get(path)
        mtime = _mtime(path)
        if force_reload or cached is None or cached.mtime != mtime:
            cached = _CachedConfig(config=load_config(path), mtime=mtime)
            _cache[path] = cached
        return cached.config


def clear_config_cache(*, config_path: Path | None = None) -> None:
    """Drop one cached path, or every entry when ``config_path`` is omitted."""
    with _lock:
        if config_path is None:
            _cache.clear()
        else:
            _cache.pop(_resolve(config_path), None)
