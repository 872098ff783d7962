# Port Collector - Enumerates the TCP ports a single process is listening on.
# Used as the live fallback when a command line carries no URL hint.

import re
import sys
from collections.abc import Callable
from typing import Any

from .base import Collector, ListeningPort

PortLookup = Callable[[int], list[int]]


class PortCollector(Collector):
    name = "ports"
    description = "Listening TCP port lookup for one process"

    def __init__(self, pid: int, platform: str | None = None):
        self.pid = int(pid)
        self.platform = platform or sys.platform

    def get_command(self) -> str:
        if self.platform == "win32":
            return "netstat -ano -p TCP"
        return (
            f"lsof -nP -a -p {self.pid} -iTCP -sTCP:LISTEN 2>/dev/null"
            " || ss -tlnpH 2>/dev/null"
        )

    def parse_output(self, raw_output: str) -> dict[str, Any]:
        listening = []
        seen = set()

        # node 1234 dev 23u IPv6 0x1 0t0 TCP *:3000 (LISTEN)
        lsof_pattern = re.compile(
            r'^\S+\s+(\d+)\s+.*?:(\d+)\s+\(LISTEN\)',
            re.MULTILINE
        )

        # LISTEN 0 511 *:3000 *:* users:(("node",pid=1234,fd=23))
        ss_pattern = re.compile(
            r'^LISTEN\s+\d+\s+\d+\s+\S*:(\d+)\s+\S+\s+users:\(.*?pid=(\d+)',
            re.MULTILINE
        )

        # TCP 0.0.0.0:3000 0.0.0.0:0 LISTENING 1234
        netstat_pattern = re.compile(
            r'^\s*TCP\s+\S*:(\d+)\s+\S+\s+LISTENING\s+(\d+)',
            re.MULTILINE | re.IGNORECASE
        )

        matches = [(int(pid), int(port)) for pid, port in lsof_pattern.findall(raw_output)]
        matches += [(int(pid), int(port)) for port, pid in ss_pattern.findall(raw_output)]
        matches += [(int(pid), int(port)) for port, pid in netstat_pattern.findall(raw_output)]

        for pid, port in matches:
            if pid != self.pid or port in seen:
                continue
            seen.add(port)
            listening.append(ListeningPort(pid=pid, port=port))

        return {"listening": listening}


def listening_port_lookup(executor, node: str = "localhost",
                          platform: str | None = None) -> PortLookup:
    def lookup(pid: int) -> list[int]:
        result = PortCollector(pid, platform).execute(executor, node)
        if not result.success:
            return []
        return [entry.port for entry in result.parsed_data.get("listening", [])]

    return lookup
