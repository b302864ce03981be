# annotations.py

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple
import json
import logging

logger = logging.getLogger(__name__)

SIDECAR_EXTENSION = ".json"


@dataclass(frozen=True)
class DemoEvent:
    """A timestamped annotation on a demo, e.g. a bookmark"""
    BOOKMARK = "Bookmark"
    KILLSTREAK = "Killstreak"

    tick: int
    name: str
    value: str = ""

    def __post_init__(self):
        if isinstance(self.tick, bool) or not isinstance(self.tick, int) or self.tick < 0:
            raise ValueError(f"Event tick must be a non-negative integer, got {self.tick!r}")
        if not isinstance(self.name, str):
            raise ValueError(f"Event name must be a string, got {self.name!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> DemoEvent:
        value = data.get('value')
        return cls(tick=data['tick'], name=data['name'], value="" if value is None else str(value))

    def to_dict(self) -> Dict[str, Any]:
        return {'tick': self.tick, 'name': self.name, 'value': self.value}


def sidecar_path(demo_path: str | Path) -> Path:
    """Path of the events/tags file that belongs to a demo"""
    return Path(demo_path).with_suffix(SIDECAR_EXTENSION)


def _parse_sidecar(content: bytes) -> Tuple[List[DemoEvent], List[str]]:
    parsed = json.loads(content)
    if not isinstance(parsed, dict):
        raise ValueError("top level is not an object")

    raw_events = parsed.get('events') or []
    raw_tags = parsed.get('tags') or []
    if not isinstance(raw_events, list) or not isinstance(raw_tags, list):
        raise ValueError("events and tags must be lists")

    events = [DemoEvent.from_dict(event) for event in raw_events]
    if not all(isinstance(tag, str) for tag in raw_tags):
        raise ValueError("tags must be strings")
    return events, list(raw_tags)


def read_events_and_tags(json_path: str | Path) -> Tuple[List[DemoEvent], List[str]]:
    """
    Read the events and tags stored beside a demo.

    A missing or malformed file means "no annotations" and yields empty lists.
    Other filesystem errors propagate.
    """
    path = Path(json_path)
    logger.debug(f"Looking for events file at {path}")
    try:
        content = path.read_bytes()
    except FileNotFoundError:
        return [], []

    try:
        return _parse_sidecar(content)
    except (ValueError, KeyError, TypeError, AttributeError, RecursionError) as e:
        logger.warning(f"Ignoring malformed events file {path}: {e}")
        return [], []


def write_events_and_tags(
    events: Sequence[DemoEvent],
    tags: Sequence[str],
    json_path: str | Path,
    overwrite: bool,
) -> None:
    """
    Persist events and tags beside a demo.

    With nothing to store the file is removed instead. With overwrite=False an
    existing file is kept untouched.
    """
    path = Path(json_path)
    if not events and not tags:
        logger.debug(f"Deleting events/tags file at {path}")
        path.unlink(missing_ok=True)
        return

    content = json.dumps(
        {'events': [event.to_dict() for event in events], 'tags': list(tags)},
        indent='\t',
    )
    logger.debug(f"Writing to events/tags file at {path}")
    try:
        with path.open('w' if overwrite else 'x', encoding='utf-8') as f:
            f.write(content)
    except FileExistsError:
        logger.debug(f"Events/tags file at {path} already exists, skipping.")
