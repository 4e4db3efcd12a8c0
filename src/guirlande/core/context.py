"""Service context shared by every component."""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

import numpy as np

from ..services.crypto import CryptoService
from .config import ServerConfig
from .output import ColorOutput, create_output
from .scheduler import AsyncioScheduler, Scheduler
from .storage import DocumentStore

if TYPE_CHECKING:
    from ..modules.registry import ModuleRegistry
    from ..modules.websocket import ModuleWebSocket
    from ..services.guirlande import GuirlandeService

logger = logging.getLogger(__name__)


@dataclass
class ServiceContext:
    """Explicit container built once at startup and passed to constructors.

    The registry, guirlande service and module websocket are attached by
    `build_context` after the collaborators they depend on exist.
    """

    config: ServerConfig
    store: DocumentStore
    scheduler: Scheduler
    output: ColorOutput
    crypto: CryptoService = field(default_factory=CryptoService)
    rng: np.random.Generator = field(default_factory=np.random.default_rng)

    modules: Optional["ModuleRegistry"] = None
    guirlande: Optional["GuirlandeService"] = None
    module_websocket: Optional["ModuleWebSocket"] = None


def build_context(
    config: ServerConfig,
    store: Optional[DocumentStore] = None,
    scheduler: Optional[Scheduler] = None,
    output: Optional[ColorOutput] = None,
) -> ServiceContext:
    """Create the context and every core service"""
    from ..modules.registry import ModuleRegistry
    from ..modules.websocket import ModuleWebSocket
    from ..services.guirlande import GuirlandeService

    context = ServiceContext(
        config=config,
        store=store or DocumentStore.from_config(config.storage),
        scheduler=scheduler or AsyncioScheduler(),
        output=output or create_output(config.guirlande),
        rng=np.random.default_rng(config.random_seed),
    )
    context.modules = ModuleRegistry(context)
    context.guirlande = GuirlandeService(context)
    context.module_websocket = ModuleWebSocket(context)
    logger.info(f"Service context built ({config.environment})")
    return context
