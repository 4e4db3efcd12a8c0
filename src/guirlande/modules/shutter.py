from ..core.documents import ModuleType
from .base import Module


class ShutterModule(Module):
    module_type = ModuleType.SHUTTER

    def up(self) -> None:
        self.send("up")

    def down(self) -> None:
        self.send("down")

    def stop(self) -> None:
        self.send("stop")
