import logging
from typing import Any

from ..core.documents import ModuleType
from .base import Module

logger = logging.getLogger(__name__)


class TestModule(Module):
    """Echo module for development: data sent to it is logged on reply.

    Unavailable in production.
    """

    __test__ = False

    module_type = ModuleType.TEST

    def send_data(self, data: Any) -> None:
        self.send("data", data)

    def register_listeners(self) -> None:
        self.listening("data", self._on_data)

    def _on_data(self, data: Any) -> None:
        logger.info(f"Received data from module {self.full_name}: {data}")
