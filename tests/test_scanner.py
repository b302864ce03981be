"""Unit tests for demo_library.scanner."""
from __future__ import annotations

import threading
from pathlib import Path
from unittest.mock import patch

import pytest

from demo_library.demo import DemoCache
from demo_library.scanner import get_demos_in_directory, is_demo_file, sort_newest_first


@pytest.fixture()
def demo_dir(tmp_path: Path, make_demo) -> Path:
    directory = tmp_path / "demos"
    make_demo("good.dem", directory=directory)
    (directory / "corrupt.dem").write_bytes(b"PBDEMS2\0" + b"\0" * 2000)
    (directory / "notes.txt").write_text("not a demo")
    return directory


def test_is_demo_file_ignores_case() -> None:
    assert is_demo_file("a.dem")
    assert is_demo_file("A.DEM")
    assert not is_demo_file("a.json")
    assert not is_demo_file("dem")


@pytest.mark.parametrize("workers", [None, 1, 4])
def test_scan_returns_only_valid_demos(cache: DemoCache, demo_dir: Path, workers) -> None:
    result = get_demos_in_directory(cache, demo_dir, max_workers=workers)

    assert [demo.name for demo in result.demos] == ["good"]
    assert [s.path.name for s in result.skipped] == ["corrupt.dem"]
    assert result.cancelled is False
    assert len(cache) == 1


def test_scan_uppercase_extension(cache: DemoCache, make_demo, tmp_path: Path) -> None:
    make_demo("LOUD.DEM")
    result = get_demos_in_directory(cache, tmp_path)
    assert [demo.name for demo in result.demos] == ["LOUD"]


def test_scan_reuses_cached_instances(cache: DemoCache, demo_dir: Path) -> None:
    existing = cache.get_demo(demo_dir / "good.dem")
    result = get_demos_in_directory(cache, demo_dir)
    assert result.demos[0] is existing


def test_scan_missing_directory_is_empty(cache: DemoCache, tmp_path: Path) -> None:
    result = get_demos_in_directory(cache, tmp_path / "nowhere")
    assert result.demos == []
    assert result.skipped == []


def test_scan_skips_dangling_symlink(cache: DemoCache, tmp_path: Path, make_demo) -> None:
    make_demo("real.dem")
    (tmp_path / "dangling.dem").symlink_to(tmp_path / "deleted.dem")
    result = get_demos_in_directory(cache, tmp_path)
    assert [demo.name for demo in result.demos] == ["real"]
    assert [s.path.name for s in result.skipped] == ["dangling.dem"]


def test_cancelled_scan_leaves_cache_untouched(cache: DemoCache, demo_dir: Path) -> None:
    cancel = threading.Event()
    cancel.set()
    result = get_demos_in_directory(cache, demo_dir, cancel=cancel)
    assert result.cancelled is True
    assert result.demos == []
    assert len(cache) == 0


def test_cancel_during_scan_leaves_cache_untouched(cache: DemoCache, tmp_path: Path, make_demo) -> None:
    for i in range(6):
        make_demo(f"m{i}.dem")
    cancel = threading.Event()
    real_stage = cache.stage

    def slow_stage(path):
        demo = real_stage(path)
        cancel.set()
        return demo

    with patch.object(cache, "stage", side_effect=slow_stage):
        result = get_demos_in_directory(cache, tmp_path, max_workers=2, cancel=cancel)

    assert result.cancelled is True
    assert len(cache) == 0


def test_sort_newest_first(cache: DemoCache, make_demo) -> None:
    old = cache.get_demo(make_demo("old.dem"))
    new = cache.get_demo(make_demo("new.dem"))
    old.birthtime, new.birthtime = 100.0, 200.0
    assert sort_newest_first([old, new]) == [new, old]


def test_scan_survives_deeply_nested_sidecar(cache: DemoCache, tmp_path: Path, make_demo) -> None:
    make_demo("good.dem")
    make_demo("deep.dem")
    (tmp_path / "deep.json").write_text('{"events": ' + "[" * 100000 + "]" * 100000 + "}")

    result = get_demos_in_directory(cache, tmp_path)

    assert sorted(demo.name for demo in result.demos) == ["deep", "good"]
    assert cache.peek(tmp_path / "deep.dem").events == []
