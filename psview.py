#!/usr/bin/env python3
"""
Lists local (or remote) processes and guesses, for each one, the URL it is
serving on and the script it is actually running.

Usage:
    python psview.py                      # Node.js processes on this machine
    python psview.py --pattern vite --url # only matches that expose a URL
    python psview.py --all --json         # every process, as JSON
    python psview.py --node web1          # scan a node from psview.yaml over SSH
"""

import argparse
import json
import subprocess
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import paramiko
import yaml
from jinja2 import Environment, FileSystemLoader

from collectors import ProcessCollector, listening_port_lookup, resolve_row_format
from extractors import ProcessRecord, normalize, urls_only

__version__ = "1.0.0"

DEFAULT_CONFIG = "psview.yaml"
TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"


class ScanError(RuntimeError):
    pass


@dataclass
class NodeConfig:
    name: str
    host: str
    port: int = 22
    user: str = "root"


@dataclass
class ScanConfig:
    pattern: str = "node"
    workers: int = 8
    timeout_seconds: int = 10
    row_format: str = "auto"
    nodes: dict[str, NodeConfig] = field(default_factory=dict)


def load_config(path: str | None = None) -> ScanConfig:
    explicit = path is not None
    config_path = Path(path or DEFAULT_CONFIG)

    if not config_path.exists():
        if explicit:
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return ScanConfig()

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config must be a mapping: {config_path}")

    scan = data.get("scan") or {}
    if not isinstance(scan, dict):
        raise ValueError("Config key 'scan' must be a mapping")

    config = ScanConfig(
        pattern=str(scan.get("pattern", "node")),
        workers=int(scan.get("workers", 8)),
        timeout_seconds=int(scan.get("timeout_seconds", 10)),
        row_format=str(scan.get("row_format", "auto")),
    )

    if config.workers < 1:
        raise ValueError("scan.workers must be at least 1")
    if config.timeout_seconds < 1:
        raise ValueError("scan.timeout_seconds must be at least 1")
    if config.row_format != "auto":
        resolve_row_format(config.row_format)

    for name, node in (data.get("nodes") or {}).items():
        if not isinstance(node, dict) or "host" not in node:
            raise ValueError(f"Node '{name}' needs a 'host'")
        config.nodes[name] = NodeConfig(
            name=name,
            host=node["host"],
            port=int(node.get("port", 22)),
            user=node.get("user", "root"),
        )

    return config


class SSHExecutor:
    def __init__(self, host: str, port: int = 22, user: str = "root", timeout: int = 30, key_file: str | None = None):
        self.host = host
        self.port = port
        self.user = user
        self.timeout = timeout
        self.key_file = key_file
        self._client: paramiko.SSHClient | None = None

    def connect(self):
        self._client = paramiko.SSHClient()
        self._client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        connect_kwargs = {
            "hostname": self.host,
            "port": self.port,
            "username": self.user,
            "timeout": self.timeout,
            "allow_agent": True,
            "look_for_keys": True,
        }

        if self.key_file:
            connect_kwargs["key_filename"] = str(Path(self.key_file).expanduser())
            connect_kwargs["allow_agent"] = False
            connect_kwargs["look_for_keys"] = False

        try:
            self._client.connect(**connect_kwargs)
        except paramiko.ssh_exception.AuthenticationException as e:
            raise RuntimeError(
                f"SSH authentication failed for {self.user}@{self.host}:{self.port}"
            ) from e

    def run(self, command: str) -> str:
        if self._client is None:
            self.connect()

        _, stdout, stderr = self._client.exec_command(command, timeout=self.timeout)
        output = stdout.read().decode("utf-8", errors="replace")
        errors = stderr.read().decode("utf-8", errors="replace")
        status = stdout.channel.recv_exit_status()

        if status != 0 and not output.strip():
            raise RuntimeError(errors.strip() or f"Command exited with status {status}")
        return output

    def close(self):
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, *args):
        self.close()


class LocalExecutor:
    def __init__(self, timeout: int = 30):
        self.timeout = timeout

    def run(self, command: str) -> str:
        result = subprocess.run(
            command,
            shell=True,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=self.timeout
        )
        if result.returncode != 0 and not result.stdout.strip():
            raise RuntimeError(
                result.stderr.strip() or f"Command exited with status {result.returncode}"
            )
        return result.stdout

    def connect(self):
        pass

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


class Reporter:
    def __init__(self, template_dir: str | Path = TEMPLATE_DIR):
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
            autoescape=False
        )
        self.env.filters['cell'] = self._cell
        self.html_env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=True
        )

    @staticmethod
    def _cell(value: Any, width: int) -> str:
        text = "-" if value is None or value == "" else str(value)
        return text.ljust(width)

    @staticmethod
    def _kind(record: ProcessRecord) -> str:
        return "Node.js" if record.is_node_like else "other"

    def render_table(self, records: list[ProcessRecord]) -> str:
        template = self.env.get_template("table.txt.j2")
        rows = [{"record": r, "kind": self._kind(r)} for r in records]
        url_width = max([len("URL")] + [len(r.url or "-") for r in records]) + 2
        return template.render(rows=rows, url_width=url_width).rstrip("\n")

    @staticmethod
    def render_json(records: list[ProcessRecord]) -> str:
        return json.dumps([r.to_dict() for r in records], indent=2)

    def render_html(self, records: list[ProcessRecord], output_path: str, node: str = "localhost") -> str:
        template = self.html_env.get_template("report.html.j2")
        rendered = template.render(
            rows=[{"record": r, "kind": self._kind(r)} for r in records],
            node=node,
            generated_at=datetime.now(timezone.utc).isoformat(),
        )

        output = Path(output_path)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(rendered)

        return str(output)


def scan_processes(executor, node: str = "localhost", platform: str | None = None,
                   pattern: str | None = "node", include_all: bool = False,
                   url_only: bool = False, row_format: str = "auto",
                   workers: int = 8, progress: bool = False) -> list[ProcessRecord]:
    platform = platform or sys.platform
    collector = ProcessCollector(row_format, platform)
    result = collector.execute(executor, node)

    if not result.success:
        raise ScanError(f"Failed to list processes on {node} ({result.command}): {result.error}")

    lookup = listening_port_lookup(executor, node, platform)
    records = normalize(
        result.parsed_data.get("rows", []),
        lookup,
        pattern=pattern,
        include_all=include_all,
        workers=workers,
        progress=progress,
    )

    return urls_only(records) if url_only else records


def get_executor(config: ScanConfig, node_name: str | None, key_file: str | None = None):
    if node_name is None:
        return LocalExecutor(timeout=config.timeout_seconds)

    node = config.nodes.get(node_name)
    if node is None:
        raise ValueError(f"Node not found in config: {node_name}")

    return SSHExecutor(
        host=node.host,
        port=node.port,
        user=node.user,
        timeout=config.timeout_seconds,
        key_file=key_file
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="psview",
        description="psview: show processes with their service URL and entry script",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Node.js processes on this machine
  python psview.py

  # Everything matching "vite", only rows with a URL
  python psview.py --pattern vite --url

  # All processes as JSON
  python psview.py --all --json

  # Scan a node defined in psview.yaml over SSH
  python psview.py --node web1 --key-file ~/.ssh/id_ed25519
        """
    )

    parser.add_argument("--pattern", "-p", default=None,
                        help="Process name pattern, case-insensitive (default: node)")
    parser.add_argument("--all", "-a", action="store_true", dest="include_all",
                        help="Show all processes")
    parser.add_argument("--url", "-u", action="store_true", dest="url_only",
                        help="Only show processes with a URL")
    parser.add_argument("--json", "-j", action="store_true", dest="as_json",
                        help="Output JSON")
    parser.add_argument("--html", default=None,
                        help="Also write an HTML report to this path")
    parser.add_argument("--config", "-c", default=None,
                        help=f"Path to config YAML (default: {DEFAULT_CONFIG} if present)")
    parser.add_argument("--node", "-n", default=None,
                        help="Scan a node from the config over SSH")
    parser.add_argument("--key-file", "-k", default=None,
                        help="SSH private key file")
    parser.add_argument("--workers", "-w", type=int, default=None,
                        help="Parallel port lookups (default: 8)")
    parser.add_argument("--row-format", choices=["auto", "columns", "csv", "json"], default=None,
                        help="Process listing format (default: auto)")
    parser.add_argument("--no-progress", action="store_true",
                        help="Hide the port lookup progress bar")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
        pattern = args.pattern if args.pattern is not None else config.pattern
        workers = args.workers if args.workers is not None else config.workers
        row_format = args.row_format or config.row_format
        if workers < 1:
            raise ValueError("--workers must be at least 1")

        node = args.node or "localhost"
        progress = not args.no_progress and not args.as_json and sys.stderr.isatty()
        # A remote node is always a POSIX host
        platform = "linux" if args.node else sys.platform

        executor = get_executor(config, args.node, args.key_file)
        try:
            executor.connect()
            records = scan_processes(
                executor,
                node=node,
                platform=platform,
                pattern=pattern,
                include_all=args.include_all,
                url_only=args.url_only,
                row_format=row_format,
                workers=workers,
                progress=progress,
            )
        finally:
            executor.close()

        reporter = Reporter()
        if args.as_json:
            print(reporter.render_json(records))
        else:
            print(reporter.render_table(records))

        if args.html:
            html_path = reporter.render_html(records, args.html, node)
            print(f"[+] HTML report: {html_path}", file=sys.stderr)

        return 0

    except ScanError as e:
        print(f"[!] {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"[!] Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
