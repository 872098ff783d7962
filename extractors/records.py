"""Record Normalizer - turns raw process rows into ProcessRecords.

Each surviving row is independent. Live port lookups are the only slow step,
so they may be fanned out to a bounded thread pool; results are matched back
by pid and the output keeps the input order.
"""

import re
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import asdict, dataclass
from typing import Any

from tqdm import tqdm

from collectors.base import RawProcessLine

from .classify import INTERPRETER, is_launcher
from .paths import extract_path
from .tokens import tokenize
from .urls import extract_url, live_url, needs_live_lookup, static_url


@dataclass(frozen=True)
class ProcessRecord:
    pid: int | None
    parent_pid: int | None
    command_line: str
    is_node_like: bool
    url: str | None
    path: str | None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def is_node_like(command_line: str) -> bool:
    if INTERPRETER in command_line.lower():
        return True
    return any(is_launcher(token) for token in tokenize(command_line))


def matches_pattern(command_line: str, pattern: str | None) -> bool:
    if not pattern:
        return True
    try:
        return re.search(pattern, command_line, re.IGNORECASE) is not None
    except re.error:
        return pattern.lower() in command_line.lower()


def select_rows(rows: Iterable[RawProcessLine], pattern: str | None = None,
                include_all: bool = False) -> list[RawProcessLine]:
    selected = []
    for row in rows:
        if not row.command_line or not row.command_line.strip():
            continue
        if include_all or matches_pattern(row.command_line, pattern):
            selected.append(row)
    return selected


def build_record(row: RawProcessLine, url: str | None) -> ProcessRecord:
    return ProcessRecord(
        pid=row.pid,
        parent_pid=row.parent_pid,
        command_line=row.command_line,
        is_node_like=is_node_like(row.command_line),
        url=url,
        path=extract_path(row.command_line),
    )


def _lookup_concurrently(rows: list[RawProcessLine],
                         lookup: Callable[[int], list[int]],
                         workers: int, progress: bool) -> dict[int, str | None]:
    pids = list(dict.fromkeys(row.pid for row in rows))

    resolved: dict[int, str | None] = {}
    if not pids:
        return resolved

    with ThreadPoolExecutor(max_workers=min(workers, len(pids))) as pool:
        futures = {pool.submit(live_url, pid, lookup): pid for pid in pids}
        completed = as_completed(futures)
        if progress:
            completed = tqdm(completed, total=len(futures), desc="Port lookups",
                             leave=False)
        for future in completed:
            resolved[futures[future]] = future.result()

    return resolved


def normalize(rows: Iterable[RawProcessLine],
              lookup: Callable[[int], list[int]],
              pattern: str | None = None,
              include_all: bool = False,
              workers: int = 1,
              progress: bool = False) -> list[ProcessRecord]:
    selected = select_rows(rows, pattern, include_all)

    if workers <= 1:
        return [
            build_record(row, extract_url(row.command_line, row.pid, lookup))
            for row in selected
        ]

    static = [static_url(row.command_line) for row in selected]
    pending = [
        row for row, url in zip(selected, static)
        if url is None and needs_live_lookup(row.command_line, row.pid)
    ]
    live = _lookup_concurrently(pending, lookup, workers, progress)

    records = []
    for row, url in zip(selected, static):
        if url is None and needs_live_lookup(row.command_line, row.pid):
            url = live.get(row.pid)
        records.append(build_record(row, url))
    return records


def urls_only(records: Iterable[ProcessRecord]) -> list[ProcessRecord]:
    return [record for record in records if record.url]
