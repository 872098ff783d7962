"""Tests for token classifier predicates."""

import pytest

from extractors.classify import (
    flag_consumes_next_argument,
    is_interpreter_executable,
    is_interpreter_flag,
    is_launcher,
    looks_like_file_path,
)


@pytest.mark.parametrize("token", [
    "node",
    "NODE",
    "/usr/local/bin/node",
    r"C:\Program Files\nodejs\node.exe",
    "/home/dev/.nvm/versions/node/v20.11.0/bin/node",
])
def test_interpreter_executable(token):
    assert is_interpreter_executable(token)


@pytest.mark.parametrize("token", ["python3", "server.js", "npm", "--inspect"])
def test_not_interpreter_executable(token):
    assert not is_interpreter_executable(token)


@pytest.mark.parametrize("token", [
    "npm",
    "NPX",
    "yarn",
    "pnpm",
    "/usr/local/bin/npm",
    r"C:\Program Files\nodejs\npm.cmd",
    "/usr/lib/node_modules/npm/bin/npm-cli.js",
    "/opt/yarn/bin/yarn.js",
])
def test_launcher(token):
    assert is_launcher(token)


@pytest.mark.parametrize("token", ["node", "server.js", "run", "npmrc"])
def test_not_launcher(token):
    assert not is_launcher(token)


@pytest.mark.parametrize("token", [
    "--inspect",
    "--inspect=0.0.0.0:9229",
    "--inspect-brk",
    "-r",
    "--require",
    "--require=ts-node/register",
    "-e",
    "--eval",
    "--loader",
    "--trace-warnings",
    "--max-old-space-size=4096",
])
def test_interpreter_flag(token):
    assert is_interpreter_flag(token)


@pytest.mark.parametrize("token", ["--port", "--inspector", "-x", "server.js", "--requirement"])
def test_not_interpreter_flag(token):
    assert not is_interpreter_flag(token)


def test_argument_consuming_flags():
    assert flag_consumes_next_argument("-r")
    assert flag_consumes_next_argument("--require")
    assert flag_consumes_next_argument("--loader")
    assert flag_consumes_next_argument("--env-file")
    assert flag_consumes_next_argument("--inspect-port")
    assert flag_consumes_next_argument("--max-old-space-size")
    assert not flag_consumes_next_argument("--require=dotenv/config")
    assert not flag_consumes_next_argument("--env-file=.env")
    assert not flag_consumes_next_argument("--inspect")
    assert not flag_consumes_next_argument("--trace-warnings")


@pytest.mark.parametrize("token", [
    "server.js",
    "app/index",
    r"src\main.ts",
    "--config=./vite.config.mjs",
    "Index.TSX",
])
def test_looks_like_file_path(token):
    assert looks_like_file_path(token)


@pytest.mark.parametrize("token", ["dev", "--watch", "4000", "--mode=production", "main.py"])
def test_does_not_look_like_file_path(token):
    assert not looks_like_file_path(token)
