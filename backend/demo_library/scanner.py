# scanner.py

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union
import logging
import os
import threading

from demo_library.demo import DEMO_EXTENSION, Demo, DemoCache
from demo_library.exceptions import InvalidDemoFile

logger = logging.getLogger(__name__)


@dataclass
class SkippedDemo:
    """A demo file the scan could not load"""
    path: Path
    reason: str


@dataclass
class ScanResult:
    directory: Path
    demos: List[Demo] = field(default_factory=list)
    skipped: List[SkippedDemo] = field(default_factory=list)
    cancelled: bool = False


class _Cancelled(Exception):
    pass


def is_demo_file(name: str) -> bool:
    return name.lower().endswith(DEMO_EXTENSION)


def sort_newest_first(demos: Iterable[Demo]) -> List[Demo]:
    return sorted(demos, key=lambda demo: demo.birthtime, reverse=True)


def _stage(cache: DemoCache, path: Path, cancel: Optional[threading.Event]) -> Union[Demo, SkippedDemo]:
    if cancel is not None and cancel.is_set():
        raise _Cancelled()
    try:
        return cache.stage(path)
    except InvalidDemoFile as e:
        logger.debug(f"Skipping {path}: {e}")
        return SkippedDemo(path, str(e))
    except OSError as e:
        logger.warning(f"Skipping unreadable demo file {path}: {e}")
        return SkippedDemo(path, str(e))


def get_demos_in_directory(
    cache: DemoCache,
    directory: Union[str, Path],
    max_workers: Optional[int] = None,
    cancel: Optional[threading.Event] = None,
) -> ScanResult:
    """
    Load every demo file in a directory through the cache.

    Files that fail to load are reported in ScanResult.skipped and do not stop
    the scan. A directory that cannot be listed gives an empty result.

    With max_workers > 1 the headers are read on a thread pool. If cancel is
    set before the scan finishes, the result is marked cancelled, holds no
    demos and the cache is left as it was.
    """
    directory = Path(directory)
    result = ScanResult(directory=directory)
    logger.debug(f"Finding demo files in {directory}")

    try:
        names = sorted(os.listdir(directory))
    except OSError as e:
        logger.error(f"Error reading path {directory}: {e}")
        return result

    paths = []
    for name in names:
        if is_demo_file(name):
            logger.debug(f"Found demo file {name}")
            paths.append(directory / name)
        else:
            logger.debug(f"Found non-demo file {name}, skipping.")

    try:
        if max_workers is not None and max_workers > 1 and len(paths) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                futures = [executor.submit(_stage, cache, path, cancel) for path in paths]
                try:
                    loaded = [future.result() for future in futures]
                except _Cancelled:
                    executor.shutdown(wait=True, cancel_futures=True)
                    raise
        else:
            loaded = [_stage(cache, path, cancel) for path in paths]
    except _Cancelled:
        logger.info(f"Scan of {directory} cancelled")
        result.cancelled = True
        return result

    if cancel is not None and cancel.is_set():
        logger.info(f"Scan of {directory} cancelled")
        result.cancelled = True
        return result

    staged = [item for item in loaded if isinstance(item, Demo)]
    result.skipped = [item for item in loaded if isinstance(item, SkippedDemo)]
    result.demos = cache.commit(staged)

    if result.skipped:
        logger.info(f"Skipped {len(result.skipped)} of {len(paths)} demo files in {directory}")
    return result
