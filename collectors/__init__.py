from .base import Collector, CollectorResult, ListeningPort, RawProcessLine
from .ports import PortCollector, listening_port_lookup
from .processes import ProcessCollector, resolve_row_format

__all__ = [
    "Collector",
    "CollectorResult",
    "ListeningPort",
    "RawProcessLine",
    "PortCollector",
    "ProcessCollector",
    "listening_port_lookup",
    "resolve_row_format",
]
