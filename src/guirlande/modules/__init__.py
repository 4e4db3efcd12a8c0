"""Connected devices and their real-time sessions"""

from .base import Module, ModuleStatus
from .led_strip import LedStripModule
from .loop import ColorPart, FadePart, Loop, WaitPart
from .registry import MODULE_CLASSES, ModuleRegistry, create_module
from .session import ModuleSession, WebSocketSession
from .shutter import ShutterModule
from .testing import TestModule
from .weather import WeatherModule
from .websocket import ModuleWebSocket

__all__ = [
    "Module",
    "ModuleStatus",
    "LedStripModule",
    "ShutterModule",
    "WeatherModule",
    "TestModule",
    "Loop",
    "ColorPart",
    "WaitPart",
    "FadePart",
    "MODULE_CLASSES",
    "ModuleRegistry",
    "create_module",
    "ModuleSession",
    "WebSocketSession",
    "ModuleWebSocket",
]
