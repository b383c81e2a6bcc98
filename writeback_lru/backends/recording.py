"""Mapping backend that records every call it receives."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from .mapping import MappingBackend

Key = Union[int, str]


class RecordingBackend(MappingBackend[Key, Any]):
    """Mapping backend that logs each call it receives.

    With ``echo`` set, a load of an index not in the store returns the index
    itself instead of None.
    """

    def __init__(self, echo: bool = False) -> None:
        super().__init__()
        self.echo = echo
        self.calls: List[Dict[str, Any]] = []

    def load(self, index: Key) -> Optional[Any]:
        self.calls.append({"op": "load", "index": index})
        item = super().load(index)
        if item is None and self.echo:
            return index
        return item

    def write_back(self, index: Key, item: Any, dirty: bool) -> None:
        self.calls.append(
            {"op": "write_back", "index": index, "item": item, "dirty": dirty}
        )
        super().write_back(index, item, dirty)
