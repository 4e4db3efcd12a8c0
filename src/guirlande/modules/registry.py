import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Type

from ..common.exceptions import ConfigurationError, NotFoundError, ValidationError
from ..core.documents import ModuleDocument, ModuleType
from .base import Module
from .led_strip import LedStripModule
from .shutter import ShutterModule
from .testing import TestModule
from .weather import WeatherModule

if TYPE_CHECKING:
    from ..core.context import ServiceContext

logger = logging.getLogger(__name__)

MODULE_CLASSES: Dict[ModuleType, Type[Module]] = {
    ModuleType.LED_STRIP: LedStripModule,
    ModuleType.SHUTTER: ShutterModule,
    ModuleType.WEATHER: WeatherModule,
    ModuleType.TEST: TestModule,
}


def create_module(context: "ServiceContext", document: ModuleDocument) -> Module:
    """Instantiate the module class matching the document type"""
    module_class = MODULE_CLASSES.get(document.type)
    if module_class is None:
        raise ConfigurationError(f"Unknown module type {document.type}", field="type")
    return module_class(context, document)


class ModuleRegistry:
    """In-memory set of known modules, mirrored from the `modules` collection.

    Modules that stay unvalidated longer than
    `modules.delete_invalidated_timeout` seconds are deleted.
    """

    def __init__(self, context: "ServiceContext"):
        self.context = context
        self.modules: List[Module] = []

    def find(self, module_id: str) -> Optional[Module]:
        for module in self.modules:
            if module.id == module_id:
                return module
        return None

    def get(self, module_id: str, module_type: Optional[ModuleType] = None) -> Module:
        module = self.find(module_id)
        if module is None or (module_type is not None and module.type != module_type):
            raise NotFoundError(f"Module {module_id} not found")
        return module

    def find_by_token(self, token: str) -> Optional[Module]:
        if not token:
            return None
        for module in self.modules:
            if module.token is not None and self.context.crypto.matches(module.token, token):
                return module
        return None

    @property
    def online(self) -> List[Module]:
        return [module for module in self.modules if module.is_online]

    async def load(self) -> None:
        if self.modules:
            await self.unload()
        docs = await self.context.store.modules.find_all()
        self.modules = [create_module(self.context, doc) for doc in docs]
        for module in self.modules:
            if not module.validated:
                self._arm_eviction(module)
        logger.info(f"Loaded {len(self.modules)} modules")

    async def unload(self) -> None:
        for module in self.modules:
            module.disconnect()
        count = len(self.modules)
        self.modules = []
        logger.info(f"Unloaded {count} modules")

    async def create(self, module_type: Any) -> Module:
        try:
            module_type = ModuleType(module_type)
        except ValueError:
            raise ValidationError.for_field("type", f"Invalid module type: {module_type}")
        if module_type is ModuleType.TEST and self.context.config.is_production:
            raise ValidationError.for_field(
                "type", "Test modules are unavailable in production"
            )

        token = self.context.crypto.generate_token(self.context.config.modules.token_length)
        doc = await self.context.store.modules.create(
            {"type": module_type, "token": token}
        )
        module = create_module(self.context, doc)
        self.modules.append(module)
        self._arm_eviction(module)
        logger.info(f"Registered {module_type.display_name} module {module.id}")
        return module

    async def delete(self, module: Module) -> None:
        """Forget and disconnect the module, then delete its document.

        Saves racing with the deletion fail with NotFoundError instead of
        writing the document back.
        """
        if module in self.modules:
            self.modules.remove(module)
        module.disconnect()
        await self.context.store.modules.delete_by_id(module.id)
        logger.info(f"Deleted module {module.full_name}")

    def _arm_eviction(self, module: Module) -> None:
        delay_ms = self.context.config.modules.delete_invalidated_timeout * 1000

        async def evict() -> None:
            if not any(m is module for m in self.modules) or module.validated:
                return
            await self.delete(module)
            logger.info(
                f"Module {module.full_name} deleted after staying unvalidated too long"
            )

        self.context.scheduler.run_once(evict, delay_ms)
