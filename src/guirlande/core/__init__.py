"""Core infrastructure: configuration, storage, scheduling and output"""

from .config import ServerConfig, ServerDefaults
from .documents import Access, ModuleDocument, ModuleType
from .output import ColorOutput, MockColorOutput, create_output
from .scheduler import AsyncioScheduler, Scheduler, TaskHandle
from .storage import DocumentStore

__all__ = [
    "ServerConfig",
    "ServerDefaults",
    "Access",
    "ModuleDocument",
    "ModuleType",
    "ColorOutput",
    "MockColorOutput",
    "create_output",
    "AsyncioScheduler",
    "Scheduler",
    "TaskHandle",
    "DocumentStore",
]
