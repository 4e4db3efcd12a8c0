from .base import Preset
from .color import Color
from .transition import Transition, TransitionState
from .types import PRESET_CLASSES

__all__ = ["Color", "PRESET_CLASSES", "Preset", "Transition", "TransitionState"]
