from .capdepute import CapdeputePreset
from .cinema import CinemaPreset
from .combustion import CombustionPreset
from .epilepsy import EpilepsyPreset
from .france import FrancePreset
from .guirlande import GuirlandePreset
from .multicolor import MulticolorPreset
from .purple_fade import PurpleFadePreset
from .utopia_blink import UtopiaBlinkPreset

PRESET_CLASSES = [
    FrancePreset,
    CinemaPreset,
    CapdeputePreset,
    EpilepsyPreset,
    GuirlandePreset,
    CombustionPreset,
    UtopiaBlinkPreset,
    MulticolorPreset,
    PurpleFadePreset,
]

__all__ = [
    "PRESET_CLASSES",
    "CapdeputePreset",
    "CinemaPreset",
    "CombustionPreset",
    "EpilepsyPreset",
    "FrancePreset",
    "GuirlandePreset",
    "MulticolorPreset",
    "PurpleFadePreset",
    "UtopiaBlinkPreset",
]
