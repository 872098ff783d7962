"""Tests for the process and port collectors."""

import json

import pytest

from collectors import ListeningPort, PortCollector, ProcessCollector, RawProcessLine, listening_port_lookup
from collectors.processes import resolve_row_format


PS_OUTPUT = """\
  PID  PPID COMMAND
    1     0 /sbin/init splash
  812     1 node /srv/app/server.js --port 8080
  813   812 npm run dev
  990   800 ps -eo pid,ppid,command
"""

WMIC_OUTPUT = """\

Node,CommandLine,ParentProcessId,ProcessId
DESKTOP,"C:\\Program Files\\nodejs\\node.exe" C:\\app\\server.js,400,4242
DESKTOP,,4,88
DESKTOP,npm.cmd run dev,400,x
"""


def test_resolve_row_format():
    assert resolve_row_format("auto", "linux") == "columns"
    assert resolve_row_format("auto", "darwin") == "columns"
    assert resolve_row_format("auto", "win32") == "json"
    assert resolve_row_format("csv", "linux") == "csv"
    with pytest.raises(ValueError):
        resolve_row_format("xml")


def test_parse_ps_columns():
    rows = ProcessCollector("columns").parse_output(PS_OUTPUT)["rows"]
    assert rows == [
        RawProcessLine(1, 0, "/sbin/init splash"),
        RawProcessLine(812, 1, "node /srv/app/server.js --port 8080"),
        RawProcessLine(813, 812, "npm run dev"),
    ]


def test_parse_wmic_csv():
    rows = ProcessCollector("csv").parse_output(WMIC_OUTPUT)["rows"]
    assert rows == [
        RawProcessLine(4242, 400, '"C:\\Program Files\\nodejs\\node.exe" C:\\app\\server.js'),
        RawProcessLine(None, 400, "npm.cmd run dev"),
    ]


def test_parse_powershell_json():
    payload = json.dumps([
        {"ProcessId": 4, "ParentProcessId": 0, "CommandLine": None},
        {"ProcessId": 4242, "ParentProcessId": 400, "CommandLine": "node.exe C:\\app\\server.js"},
    ])
    rows = ProcessCollector("json").parse_output(payload)["rows"]
    assert rows == [RawProcessLine(4242, 400, "node.exe C:\\app\\server.js")]


def test_parse_powershell_single_object():
    payload = json.dumps({"ProcessId": "7", "ParentProcessId": "1", "CommandLine": "node a.js"})
    rows = ProcessCollector("json").parse_output(payload)["rows"]
    assert rows == [RawProcessLine(7, 1, "node a.js")]


def test_process_collector_reports_failure(fake_executor):
    executor = fake_executor({"ps -eo": RuntimeError("ps: not found")})
    result = ProcessCollector("columns").execute(executor, "localhost")
    assert not result.success
    assert "ps: not found" in result.error
    assert result.command == "ps -eo pid,ppid,command"
    assert result.parsed_data == {}


LSOF_OUTPUT = """\
COMMAND  PID USER   FD   TYPE DEVICE SIZE/OFF NODE NAME
node    4242  dev   23u  IPv6 0x1234      0t0  TCP *:5173 (LISTEN)
node    4242  dev   24u  IPv4 0x1235      0t0  TCP 127.0.0.1:24678 (LISTEN)
node    4242  dev   25u  IPv4 0x1236      0t0  TCP [::1]:5173 (LISTEN)
"""

SS_OUTPUT = """\
LISTEN 0      511          *:3000            *:*    users:(("node",pid=4242,fd=23))
LISTEN 0      128    0.0.0.0:22        0.0.0.0:*    users:(("sshd",pid=611,fd=3))
"""

NETSTAT_OUTPUT = """\

Active Connections

  Proto  Local Address          Foreign Address        State           PID
  TCP    0.0.0.0:135            0.0.0.0:0              LISTENING       1000
  TCP    0.0.0.0:3000           0.0.0.0:0              LISTENING       4242
  TCP    127.0.0.1:3000         127.0.0.1:50000        ESTABLISHED     4242
  TCP    [::]:3001              [::]:0                 LISTENING       4242
"""


def test_port_commands_per_platform():
    assert "lsof" in PortCollector(4242, "linux").get_command()
    assert "-p 4242" in PortCollector(4242, "darwin").get_command()
    assert PortCollector(4242, "win32").get_command() == "netstat -ano -p TCP"


def test_parse_lsof():
    parsed = PortCollector(4242, "linux").parse_output(LSOF_OUTPUT)
    assert parsed["listening"] == [ListeningPort(4242, 5173), ListeningPort(4242, 24678)]


def test_parse_ss_filters_by_pid():
    parsed = PortCollector(4242, "linux").parse_output(SS_OUTPUT)
    assert parsed["listening"] == [ListeningPort(4242, 3000)]


def test_parse_netstat_listening_only():
    parsed = PortCollector(4242, "win32").parse_output(NETSTAT_OUTPUT)
    assert parsed["listening"] == [ListeningPort(4242, 3000), ListeningPort(4242, 3001)]


def test_lookup_returns_ports(fake_executor):
    executor = fake_executor({"lsof": LSOF_OUTPUT})
    lookup = listening_port_lookup(executor, "localhost", "linux")
    assert lookup(4242) == [5173, 24678]


def test_lookup_failure_is_empty(fake_executor):
    executor = fake_executor({"lsof": RuntimeError("Command exited with status 1")})
    lookup = listening_port_lookup(executor, "localhost", "linux")
    assert lookup(4242) == []


def test_wmic_commas_stay_in_command_line():
    output = "Node,CommandLine,ParentProcessId,ProcessId\nHOST,node a.js --hosts=a,b,c,1,2\n"
    rows = ProcessCollector("csv").parse_output(output)["rows"]
    assert rows == [RawProcessLine(2, 1, "node a.js --hosts=a,b,c")]
