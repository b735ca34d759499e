"""Output reporting helpers."""
from __future__ import annotations

import csv
import json
import os
import tempfile
from contextlib import contextmanager
from datetime import datetime
from typing import Iterable, Iterator, List, Optional, TextIO

from .cache import CacheEntry
from .classifier import ClassificationResult, Whitelist
from .pipeline import ScanResult

ALL_CLEAN_MESSAGE = "All places have complete data and no emojis in names."


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def format_timestamp(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


def _fsync_dir(path: str) -> None:
    try:
        dir_fd = os.open(path, os.O_DIRECTORY)
    except (AttributeError, OSError):
        return
    try:
        os.fsync(dir_fd)
    except OSError:
        pass
    finally:
        os.close(dir_fd)


@contextmanager
def atomic_writer(
    path: str,
    mode: str = "w",
    encoding: str = "utf-8",
    newline: Optional[str] = None,
) -> Iterator[TextIO]:
    dir_path = os.path.dirname(path) or "."
    base = os.path.basename(path)
    fd, tmp_path = tempfile.mkstemp(prefix=f".{base}.", suffix=".tmp", dir=dir_path)
    try:
        with os.fdopen(fd, mode, encoding=encoding, newline=newline) as f:
            yield f
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
        _fsync_dir(dir_path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def atomic_write_text(path: str, text: str) -> None:
    with atomic_writer(path, mode="w", encoding="utf-8") as f:
        f.write(text)


def write_results_json(path: str, rows: Iterable[ClassificationResult]) -> None:
    with atomic_writer(path, mode="w", encoding="utf-8") as f:
        json.dump([r.to_dict() for r in rows], f, ensure_ascii=False, indent=2)


def write_results_csv(path: str, rows: Iterable[ClassificationResult]) -> None:
    fieldnames = ["id", "name", "uri", "missing", "primaryType", "primaryTypeDisplayName"]
    with atomic_writer(path, mode="w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for row in rows:
            out = row.to_dict()
            out["missing"] = "; ".join(row.flags)
            writer.writerow(out)


def render_results(result: ScanResult, whitelist: Optional[Whitelist] = None) -> List[str]:
    lines: List[str] = []
    if result.from_cache:
        lines.append(f"Cached results from {format_timestamp(result.timestamp)}")
    visible = result.visible(whitelist)
    if not visible:
        lines.append(ALL_CLEAN_MESSAGE)
        return lines
    for row in visible:
        label = f"{row.name} [{row.place_id}]"
        if row.primary_type_display_name:
            label += f" ({row.primary_type_display_name})"
        lines.append(f"{label} - flagged for: {', '.join(row.flags)}")
        if row.uri:
            lines.append(f"    {row.uri}")
    return lines


def render_cache_listing(entries: Iterable[CacheEntry]) -> List[str]:
    lines = []
    for idx, entry in enumerate(entries):
        lines.append(
            f"[{idx}] {format_timestamp(entry.timestamp)} "
            f"location {entry.lat:.3f}, {entry.lng:.3f} ({entry.radius}m radius) "
            f"results: {len(entry.results)} places"
        )
    if not lines:
        lines.append("No cached results")
    return lines
