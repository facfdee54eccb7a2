"""Runtime: the diagnostic port, sinks and their synchronization.

Python 3.13+.
"""

from .collection import DiagnosticSink, InMemoryDiagnosticCollection
from .port import DiagnosticPort, DocumentInfo, DocumentSource
from .port_config import PortConfig
from .rwlock import RWLock

__all__ = [
    "DiagnosticPort",
    "DiagnosticSink",
    "DocumentInfo",
    "DocumentSource",
    "InMemoryDiagnosticCollection",
    "PortConfig",
    "RWLock",
]
