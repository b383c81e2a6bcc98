"""Command-line trace replay for the write-back cache.

Replays a trace of cache operations against an in-memory backend that records
every call it receives, and prints those calls as JSON lines followed by a
stats summary. Handy for checking eviction order and dirty tracking by hand.

Trace format (one operation per line, ``#`` starts a comment)::

    insert 0 zero
    get 0
    get_mut 1
    flush

Usage
-----
    writeback-lru --trace ops.txt --capacity 3
    python -m writeback_lru.cli --trace ops.txt --config cache.json --echo
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple

from .backends.recording import Key, RecordingBackend
from .cache import WriteBackLRU
from .config.models import CacheConfig, EnvSettings
from .keymaps import KeyMapKind
from .observability import setup_logging

logger = logging.getLogger(__name__)

_OPS = {"get": 1, "get_mut": 1, "insert": 2, "flush": 0}


class TraceError(ValueError):
    """Raised for malformed trace lines."""


def _parse_key(token: str) -> Key:
    try:
        return int(token)
    except ValueError:
        return token


def parse_trace(lines: Iterable[str]) -> List[Tuple[str, List[Key]]]:
    """Parse trace lines into ``(op, args)`` pairs.

    Raises
    ------
    TraceError
        On an unknown operation or a wrong number of arguments.
    """
    ops: List[Tuple[str, List[Key]]] = []
    for lineno, raw in enumerate(lines, start=1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        op, *args = line.split()
        if op not in _OPS:
            raise TraceError(f"line {lineno}: unknown operation {op!r}")
        if len(args) != _OPS[op]:
            raise TraceError(
                f"line {lineno}: {op} takes {_OPS[op]} argument(s), got {len(args)}"
            )
        ops.append((op, [_parse_key(a) for a in args]))
    return ops


def check_key_types(ops: Iterable[Tuple[str, List[Key]]]) -> None:
    """Reject traces whose indices cannot be ordered against each other.

    Raises
    ------
    TraceError
        When the trace uses both int and str indices.
    """
    seen = {type(args[0]) for op, args in ops if args}
    if len(seen) > 1:
        raise TraceError(
            "trace mixes int and str indices; the ordered key map needs one type"
        )


def replay(
    cache: WriteBackLRU[Key, Any], ops: Iterable[Tuple[str, List[Key]]]
) -> None:
    """Apply parsed trace operations to ``cache`` in order."""
    for op, args in ops:
        if op == "get":
            cache.get(args[0])
        elif op == "get_mut":
            cache.get_mut(args[0])
        elif op == "insert":
            cache.insert(args[0], args[1])
        else:
            cache.flush()


def _resolve_config(
    args: argparse.Namespace, env: EnvSettings
) -> CacheConfig:
    """Merge settings: CLI flag > config file > environment > default."""
    base = CacheConfig.load(Path(args.config)) if args.config else CacheConfig()
    fields = base.model_fields_set
    capacity = base.capacity
    key_map = base.key_map
    if env.capacity is not None and "capacity" not in fields:
        capacity = env.capacity
    if env.key_map is not None and "key_map" not in fields:
        key_map = env.key_map
    if args.capacity is not None:
        capacity = args.capacity
    if args.key_map is not None:
        key_map = KeyMapKind(args.key_map)
    return CacheConfig(capacity=capacity, key_map=key_map)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint for replaying a cache trace."""
    parser = argparse.ArgumentParser(description="Write-back LRU trace replay")
    parser.add_argument("--trace", required=True, help="Path to the trace file")
    parser.add_argument("--config", help="Path to JSON cache config")
    parser.add_argument("--capacity", type=int, help="Cache capacity")
    parser.add_argument(
        "--key-map",
        dest="key_map",
        choices=[kind.value for kind in KeyMapKind],
        help="Index map variant",
    )
    parser.add_argument(
        "--echo",
        action="store_true",
        help="Backend loads of unknown indices return the index itself",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        help="Logging level (overrides environment)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (once sets DEBUG)",
    )
    args = parser.parse_args(argv)

    try:
        env = EnvSettings()
    except ValueError as exc:
        parser.error(f"invalid environment settings: {exc}")
    effective_level = args.log_level or (
        "DEBUG" if args.verbose > 0 else env.log_level.upper()
    )
    setup_logging(effective_level)

    try:
        ops = parse_trace(Path(args.trace).read_text().splitlines())
    except (OSError, TraceError) as exc:
        parser.error(str(exc))
    try:
        config = _resolve_config(args, env)
        if config.key_map is KeyMapKind.ORDERED:
            check_key_types(ops)
    except (OSError, ValueError) as exc:
        parser.error(str(exc))
    logger.info(
        "cli.replay_start",
        extra={"capacity": config.capacity, "key_map": config.key_map.value},
    )

    backend = RecordingBackend(echo=args.echo)
    cache = config.build(backend)
    replay(cache, ops)

    for call in backend.calls:
        print(json.dumps(call, default=str))
    print(json.dumps({"op": "stats", **asdict(cache.stats), "resident": len(cache)}))
    return 0


if __name__ == "__main__":
    sys.exit(main())
