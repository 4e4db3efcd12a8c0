from typing import Optional

from ..core.documents import ModuleType
from .base import Module
from .loop import Loop

CURRENT_COLOR = "currentColor"
CURRENT_LOOP = "currentLoop"


class LedStripModule(Module):
    """LED strip driven either by a fixed color or by a loop script"""

    module_type = ModuleType.LED_STRIP

    async def send_color(self, r: int, g: int, b: int) -> None:
        color = {"red": r, "green": g, "blue": b}
        self.send("color", color)
        await self.update_metadata({CURRENT_COLOR: color})

    async def send_loop(self, loop: Optional[Loop] = None) -> None:
        """Send a loop script, or stop the device loop when `loop` is None"""
        text = loop.build() if loop is not None else None
        self.send("loop", {"loop": text})
        await self.update_metadata({CURRENT_LOOP: text})

    def replay(self) -> None:
        metadata = self.metadata
        color = metadata.get(CURRENT_COLOR)
        if color is not None:
            self.send("color", color)
        loop = metadata.get(CURRENT_LOOP)
        if loop is not None:
            self.send("loop", {"loop": loop})
