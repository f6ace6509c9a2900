"""DepHealth - dependency vulnerability and staleness resolution engine."""

__version__ = "0.1.0"

from .config import EngineConfig
from .core.engine import DependencyHealthEngine
from .core.models import DependencyReport
from .errors import DepHealthError, NetworkError
from .http.client import FetchClient

__all__ = [
    "DepHealthError",
    "DependencyHealthEngine",
    "DependencyReport",
    "EngineConfig",
    "FetchClient",
    "NetworkError",
]
