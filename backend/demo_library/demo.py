# demo.py

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional
import logging
import os
import re
import threading

from demo_library.annotations import (
    DemoEvent,
    read_events_and_tags,
    sidecar_path,
    write_events_and_tags,
)
from demo_library.demo_header import DemoHeader
from demo_library.exceptions import InvalidDemoName

logger = logging.getLogger(__name__)

DEMO_EXTENSION = ".dem"
MAX_NAME_LENGTH = 50

# Letters, digits and a few punctuation marks; no path separators.
VALID_NAME = re.compile(r'^[a-zA-Z0-9\-_ \[\]().]{1,%d}$' % MAX_NAME_LENGTH)


def validate_demo_name(name: str) -> str:
    """Check a new base name (without extension) for a demo file"""
    if not isinstance(name, str) or not VALID_NAME.fullmatch(name):
        raise InvalidDemoName(name)
    return name


def _birthtime(stats: os.stat_result) -> float:
    # st_birthtime is missing on most Linux filesystems
    return getattr(stats, 'st_birthtime', stats.st_ctime)


@dataclass(eq=False)
class Demo:
    """
    One demo file with its header, file metadata and user annotations.

    Instances are shared: the cache hands the same object to every caller, so
    state is only ever changed through the methods below.
    """
    path: Path
    header: DemoHeader
    birthtime: float
    filesize: int
    events: List[DemoEvent] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)

    @classmethod
    def load(cls, canonical_path: Path) -> Demo:
        """Read stats, header and annotations of a demo file"""
        stats = os.stat(canonical_path)
        header = DemoHeader.from_file(canonical_path)
        events, tags = read_events_and_tags(sidecar_path(canonical_path))
        return cls(
            path=canonical_path,
            header=header,
            birthtime=_birthtime(stats),
            filesize=stats.st_size,
            events=events,
            tags=tags,
        )

    @property
    def name(self) -> str:
        """File name without the .dem extension"""
        return self.path.stem

    @property
    def sidecar_path(self) -> Path:
        return sidecar_path(self.path)

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def write_events(self, events: Iterable[DemoEvent]) -> None:
        with self._lock:
            self.events = list(events)
            write_events_and_tags(self.events, self.tags, self.sidecar_path, overwrite=True)

    def write_tags(self, tags: Iterable[str]) -> None:
        with self._lock:
            self.tags = list(dict.fromkeys(tags))
            write_events_and_tags(self.events, self.tags, self.sidecar_path, overwrite=True)

    def rename(self, new_name: str) -> Path:
        """Rename the demo and its events file, returns the new demo path"""
        validate_demo_name(new_name)
        with self._lock:
            logger.info(f"Renaming demo {self.name} to {new_name}")
            directory = self.path.parent
            new_path = self.path.with_name(new_name + self.path.suffix)
            if new_path.exists():
                raise FileExistsError(f"A demo named {new_name} already exists in {directory}")

            old_sidecar = self.sidecar_path
            os.rename(self.path, new_path)
            try:
                os.rename(old_sidecar, sidecar_path(new_path))
            except FileNotFoundError:
                # This demo has no events file
                pass
            except OSError:
                # Undo the demo rename
                os.rename(new_path, self.path)
                raise
            self.path = new_path
            return new_path

    def delete(self) -> None:
        """Delete the demo and its events file"""
        with self._lock:
            logger.info(f"Deleting demo {self.path}")
            os.remove(self.path)
            try:
                os.remove(self.sidecar_path)
            except FileNotFoundError:
                # This demo has no events file
                pass

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': str(self.path),
            'name': self.name,
            'header': self.header.to_dict(),
            'birthtime': self.birthtime,
            'filesize': self.filesize,
            'events': [event.to_dict() for event in self.events],
            'tags': list(self.tags),
        }


class DemoCache:
    """
    Process-wide map from canonical path to its single live Demo.

    Construct one at startup and pass it to whoever needs demos. Lookups,
    inserts and re-keying share one lock; loading a demo holds a per-path
    lock so a file is parsed once even under concurrent first access.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._demos: Dict[Path, Demo] = {}
        self._path_locks: Dict[Path, threading.Lock] = {}

    @staticmethod
    def canonicalize(path: str | Path) -> Path:
        """Absolute path with symlinks resolved; the file must exist"""
        return Path(path).resolve(strict=True)

    def __len__(self) -> int:
        with self._lock:
            return len(self._demos)

    def __contains__(self, path: str | Path) -> bool:
        return self.peek(path) is not None

    def peek(self, path: str | Path) -> Optional[Demo]:
        """Cached demo for path, without loading anything"""
        # Non-strict resolve so a path whose file is already gone still maps to its key
        key = Path(path).resolve()
        with self._lock:
            return self._demos.get(key)

    def _path_lock(self, canonical: Path) -> threading.Lock:
        with self._lock:
            return self._path_locks.setdefault(canonical, threading.Lock())

    def _lookup_or_load(self, canonical: Path, insert: bool) -> Demo:
        with self._lock:
            demo = self._demos.get(canonical)
        if demo is not None:
            return demo

        with self._path_lock(canonical):
            with self._lock:
                demo = self._demos.get(canonical)
            if demo is not None:
                return demo
            demo = Demo.load(canonical)
            if insert:
                with self._lock:
                    demo = self._demos.setdefault(canonical, demo)
            return demo

    def get_demo(self, path: str | Path) -> Demo:
        """
        Return the demo at path, loading and caching it on first access.

        Errors from the filesystem or the header parser propagate and leave the
        cache unchanged.
        """
        return self._lookup_or_load(self.canonicalize(path), insert=True)

    def stage(self, path: str | Path) -> Demo:
        """Like get_demo, but a newly loaded demo is not inserted until commit()"""
        return self._lookup_or_load(self.canonicalize(path), insert=False)

    def commit(self, demos: Iterable[Demo]) -> List[Demo]:
        """Insert staged demos; an entry that already exists wins over the staged one"""
        with self._lock:
            return [self._demos.setdefault(demo.path, demo) for demo in demos]

    def evict(self, path: str | Path) -> Optional[Demo]:
        key = Path(path).resolve()
        with self._lock:
            self._path_locks.pop(key, None)
            return self._demos.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._demos.clear()
            self._path_locks.clear()

    def rename_demo(self, demo: Demo, new_name: str) -> Demo:
        """Rename a cached demo and move its entry to the new path"""
        with demo.lock:
            old_path = demo.path
            new_path = demo.rename(new_name)
            canonical = self.canonicalize(new_path)
            with self._lock:
                if self._demos.get(old_path) is demo:
                    del self._demos[old_path]
                self._path_locks.pop(old_path, None)
                demo.path = canonical
                self._demos[canonical] = demo
        return demo

    def delete_demo(self, demo: Demo) -> None:
        """Delete a cached demo from disk and drop its entry"""
        with demo.lock:
            demo.delete()
            with self._lock:
                if self._demos.get(demo.path) is demo:
                    del self._demos[demo.path]
                self._path_locks.pop(demo.path, None)
