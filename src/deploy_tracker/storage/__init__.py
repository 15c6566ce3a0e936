"""Storage abstractions for deploy logs."""

from .backend import open_deploy_log
from .base import DeployLog, DeployRepository, DeployStore
from .chroma import ChromaDeployLog, ChromaUnavailableError
from .memory import InMemoryDeployLog

__all__ = [
    "ChromaDeployLog",
    "ChromaUnavailableError",
    "DeployLog",
    "DeployRepository",
    "DeployStore",
    "InMemoryDeployLog",
    "open_deploy_log",
]
