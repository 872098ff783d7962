# Process Collector - Enumerates running processes with their command lines.
# Produces one RawProcessLine per row, whatever the platform's row shape.

import json
import sys
from typing import Any

from .base import Collector, RawProcessLine, parse_int

ROW_FORMATS = ("columns", "csv", "json")

COMMANDS = {
    "columns": "ps -eo pid,ppid,command",
    "csv": "wmic process get ProcessId,ParentProcessId,CommandLine /format:csv",
    "json": (
        'powershell -NoProfile -Command "Get-CimInstance Win32_Process | '
        'Select-Object ProcessId,ParentProcessId,CommandLine | ConvertTo-Json -Compress"'
    ),
}

# Rows produced by the listing commands themselves
SELF_MARKERS = ("ps -eo pid,ppid,command", "wmic process get", "Get-CimInstance Win32_Process")


def resolve_row_format(row_format: str = "auto", platform: str | None = None) -> str:
    if row_format == "auto":
        platform = platform or sys.platform
        return "json" if platform == "win32" else "columns"
    if row_format not in ROW_FORMATS:
        raise ValueError(f"Unknown row format: {row_format}")
    return row_format


def is_listing_command(command_line: str) -> bool:
    return any(marker in command_line for marker in SELF_MARKERS)


class ProcessCollector(Collector):
    name = "processes"
    description = "Running process enumeration"

    def __init__(self, row_format: str = "auto", platform: str | None = None):
        self.row_format = resolve_row_format(row_format, platform)

    def get_command(self) -> str:
        return COMMANDS[self.row_format]

    def parse_output(self, raw_output: str) -> dict[str, Any]:
        parser = {
            "columns": self._parse_columns,
            "csv": self._parse_csv,
            "json": self._parse_json,
        }[self.row_format]

        rows = [
            row for row in parser(raw_output)
            if row.command_line and not is_listing_command(row.command_line)
        ]
        return {"rows": rows}

    @staticmethod
    def _parse_columns(raw_output: str) -> list[RawProcessLine]:
        rows = []

        for line in raw_output.strip().split("\n"):
            parts = line.strip().split(None, 2)
            if len(parts) < 3:
                continue
            # Header line: "PID PPID COMMAND" (or "CMD" on some ps builds)
            if parts[0].upper() == "PID":
                continue
            pid, ppid, command = parts
            rows.append(RawProcessLine(parse_int(pid), parse_int(ppid), command.strip()))

        return rows

    @staticmethod
    def _parse_csv(raw_output: str) -> list[RawProcessLine]:
        lines = [line.strip() for line in raw_output.splitlines() if line.strip()]
        if not lines:
            return []

        # wmic sorts columns alphabetically (Node,CommandLine,ParentProcessId,ProcessId)
        # and does not quote fields, so extra commas belong to CommandLine.
        header = [column.strip() for column in lines[0].split(",")]
        if "CommandLine" not in header:
            return []
        command_index = header.index("CommandLine")

        rows = []
        for line in lines[1:]:
            parts = line.split(",")
            if len(parts) < len(header):
                continue
            overflow = len(parts) - len(header)
            command = ",".join(parts[command_index:command_index + overflow + 1])
            values = parts[:command_index] + [command] + parts[command_index + overflow + 1:]
            record = dict(zip(header, values))
            rows.append(RawProcessLine(
                parse_int(record.get("ProcessId")),
                parse_int(record.get("ParentProcessId")),
                command.strip(),
            ))

        return rows

    @staticmethod
    def _parse_json(raw_output: str) -> list[RawProcessLine]:
        text = raw_output.strip()
        if not text:
            return []

        data = json.loads(text)
        if isinstance(data, dict):
            data = [data]

        rows = []
        for record in data:
            if not isinstance(record, dict):
                continue
            command = record.get("CommandLine") or ""
            rows.append(RawProcessLine(
                parse_int(record.get("ProcessId")),
                parse_int(record.get("ParentProcessId")),
                str(command).strip(),
            ))

        return rows
