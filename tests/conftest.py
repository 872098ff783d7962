"""Pytest configuration and shared fixtures."""

import pytest


class FakeExecutor:
    """Executor that answers commands from a table of canned outputs.

    Keys are substrings of the command; a value that is an exception is raised.
    """

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.commands = []

    def run(self, command):
        self.commands.append(command)
        for needle, output in self.responses.items():
            if needle in command:
                if isinstance(output, Exception):
                    raise output
                return output
        raise RuntimeError(f"unexpected command: {command}")

    def connect(self):
        pass

    def close(self):
        pass


class RecordingLookup:
    """Port lookup returning fixed ports per pid and remembering calls."""

    def __init__(self, ports=None, error=None):
        self.ports = ports or {}
        self.error = error
        self.calls = []

    def __call__(self, pid):
        self.calls.append(pid)
        if self.error is not None:
            raise self.error
        return self.ports.get(pid, [])


@pytest.fixture
def fake_executor():
    return FakeExecutor


@pytest.fixture
def lookup():
    return RecordingLookup
