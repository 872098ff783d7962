# Abstract base collector for psview

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass
class CollectorResult:
    node: str
    parsed_data: dict[str, Any]
    command: str
    success: bool
    error: str | None = None


@dataclass(frozen=True)
class RawProcessLine:
    pid: int | None
    parent_pid: int | None
    command_line: str


@dataclass(frozen=True)
class ListeningPort:
    pid: int
    port: int


def parse_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


class Collector(ABC):

    name: str = "base"
    description: str = "Base collector"

    @abstractmethod
    def get_command(self) -> str:
        pass

    @abstractmethod
    def parse_output(self, raw_output: str) -> dict[str, Any]:
        pass

    def execute(self, executor, node: str) -> CollectorResult:
        command = self.get_command()
        try:
            raw_output = executor.run(command)
            parsed = self.parse_output(raw_output)
            return CollectorResult(
                node=node,
                parsed_data=parsed,
                command=command,
                success=True
            )
        except Exception as e:
            return CollectorResult(
                node=node,
                parsed_data={},
                command=command,
                success=False,
                error=str(e)
            )
