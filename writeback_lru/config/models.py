"""Config models and loader.

This module defines Pydantic models for file- and environment-based cache
configuration. JSON parsing prefers `orjson` when available and otherwise uses
the standard library's `json` module.
"""

from __future__ import annotations

import json as _json
from pathlib import Path
from typing import Any, Callable, Optional

try:
    import orjson as _orjson_mod  # type: ignore[assignment]
except ImportError:  # pragma: no cover - optional dependency
    _orjson_mod = None  # type: ignore[assignment]
    _loads_orjson: Optional[Callable[[bytes], Any]] = None
else:

    def _loads_orjson(buf: bytes) -> Any:
        loader = getattr(_orjson_mod, "loads")  # type: ignore[assignment]
        return loader(buf)


from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..backends import CacheBackend
from ..cache import DEFAULT_CAPACITY, WriteBackLRU
from ..keymaps import KeyMapKind, create_key_map


class CacheConfig(BaseModel):
    """Cache construction options.

    Attributes
    ----------
    capacity: int
        Bound on the summed backend weight of resident items.
    key_map: KeyMapKind
        "hash" for hashable indices, "ordered" for totally ordered ones.
    """

    capacity: int = Field(DEFAULT_CAPACITY, ge=1, description="Weight bound")
    key_map: KeyMapKind = Field(KeyMapKind.HASH, description="Index map variant")

    @staticmethod
    def load(path: Path) -> "CacheConfig":
        """Load cache config from a JSON file."""
        raw = path.read_bytes()
        if _loads_orjson is not None:
            data = _loads_orjson(raw)
        else:
            data = _json.loads(raw.decode("utf-8"))
        return CacheConfig.model_validate(data)

    def build(self, backend: CacheBackend[Any, Any]) -> WriteBackLRU[Any, Any]:
        """Construct an engine over ``backend`` with these options."""
        return WriteBackLRU(
            backend, capacity=self.capacity, key_map=create_key_map(self.key_map)
        )


class EnvSettings(BaseSettings):
    """Environment-driven settings and .env support.

    Attributes
    ----------
    log_level: str
        Logging level name (e.g., "DEBUG", "INFO"). Defaults to "INFO".
    capacity: Optional[int]
        Capacity override; unset leaves the file or default value in place.
    key_map: Optional[KeyMapKind]
        Key map override.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="WRITEBACK_LRU_", extra="ignore"
    )

    log_level: str = Field("INFO")
    capacity: Optional[int] = Field(None, ge=1)
    key_map: Optional[KeyMapKind] = None
