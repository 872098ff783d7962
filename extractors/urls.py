"""URL Extractor - best guess at the address a process is serving on.

Cheap static hints in the command line win over the live socket-table
lookup, and explicit signals win over framework conventions.
"""

import re
from collections.abc import Callable

from .classify import INTERPRETER

PORT_FLAG_PATTERN = re.compile(r'(?:--port|--listen|-p)\s+(\d+)')
LITERAL_URL_PATTERN = re.compile(r'(https?://\S+)')
FRAMEWORK_PATTERN = re.compile(r'express|app\.listen|server\.listen')

DEFAULT_FRAMEWORK_URL = "http://localhost:3000"


def localhost_url(port: int | str) -> str:
    return f"http://localhost:{port}"


def static_url(command_line: str) -> str | None:
    port_match = PORT_FLAG_PATTERN.search(command_line)
    if port_match:
        return localhost_url(port_match.group(1))

    url_match = LITERAL_URL_PATTERN.search(command_line)
    if url_match:
        return url_match.group(1)

    if FRAMEWORK_PATTERN.search(command_line):
        return DEFAULT_FRAMEWORK_URL

    return None


def needs_live_lookup(command_line: str, pid: int | None) -> bool:
    return pid is not None and INTERPRETER in command_line.lower()


def live_url(pid: int, live_port_lookup: Callable[[int], list[int]]) -> str | None:
    try:
        ports = list(live_port_lookup(pid) or [])
    except Exception:
        return None
    if not ports:
        return None
    return localhost_url(ports[0])


def extract_url(command_line: str, pid: int | None,
                live_port_lookup: Callable[[int], list[int]]) -> str | None:
    url = static_url(command_line)
    if url is not None:
        return url

    if needs_live_lookup(command_line, pid):
        return live_url(pid, live_port_lookup)

    return None
