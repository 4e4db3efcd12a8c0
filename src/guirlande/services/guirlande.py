import asyncio
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from ..common.exceptions import AccessDeniedError
from ..core.documents import Access, GuirlandeDocument
from ..core.scheduler import TaskHandle
from ..presets.base import Preset
from ..presets.color import Color
from ..presets.transition import Transition
from ..presets.types import PRESET_CLASSES

if TYPE_CHECKING:
    from ..core.context import ServiceContext

logger = logging.getLogger(__name__)

ROTATION_KEY = "guirlande-rotation"
CROSSFADE_KEY = "guirlande-crossfade"


class GuirlandeService:
    """Drives the physical RGB output: direct colors, preset rotation and the
    access settings stored in the `guirlande` collection.

    While presets are active a random preset runs and is replaced every
    `guirlande.rotation_interval` seconds: the running preset is stopped, the
    output crossfades to black, and a new preset starts after
    `guirlande.preset_pause` seconds.
    """

    def __init__(self, context: "ServiceContext"):
        self.context = context
        self.config = context.config.guirlande
        self._color = Color()
        self.presets: List[Preset] = [preset_class(context) for preset_class in PRESET_CLASSES]
        self.current_preset: Optional[Preset] = None
        self._rotation: Optional[TaskHandle] = None
        self._handoff: List[TaskHandle] = []
        self._settings_lock = asyncio.Lock()

    # Color output

    @property
    def color(self) -> Color:
        return self._color.copy()

    def set_color(self, color: Color) -> None:
        self.set_color_rgb(color.r, color.g, color.b)

    def set_color_hex(self, text: str) -> None:
        self.set_color(Color.from_hex(text))

    def set_color_rgb(self, r: float, g: float, b: float) -> None:
        self._color.set(r, g, b)
        output = self.context.output
        for pin, value in zip(self.config.pins, self._color.to_tuple()):
            output.write_channel(pin, value)

    # Preset rotation

    @property
    def presets_active(self) -> bool:
        return self._rotation is not None

    def start_presets(self) -> None:
        if self._rotation is not None:
            return
        self._rotation = self.context.scheduler.run_recurring(
            ROTATION_KEY, self._rotate, self.config.rotation_interval * 1000
        )
        logger.info("Preset rotation started")
        self._rotate()

    def stop_presets(self) -> None:
        if self._rotation is None:
            return
        self._rotation.stop()
        self._rotation = None
        self._cancel_handoff()
        if self.current_preset is not None:
            self.current_preset.stop()
            self.current_preset = None
        self.set_color_rgb(0, 0, 0)
        logger.info("Preset rotation stopped")

    def toggle_presets(self) -> bool:
        if self.presets_active:
            self.stop_presets()
        else:
            self.start_presets()
        return self.presets_active

    def _rotate(self) -> None:
        self._cancel_handoff()
        if self.current_preset is None:
            self._start_random_preset()
            return

        self.current_preset.stop()
        self.current_preset = None
        fading = self._color.copy()
        transition = Transition(
            fading, Color(0, 0, 0), self.config.crossfade_speed, self.config.crossfade_duration
        )

        def crossfade() -> None:
            transition.run()
            self.set_color(fading)
            if transition.finished:
                ticker.stop()
                self._handoff.append(
                    self.context.scheduler.run_once(
                        self._start_random_preset, self.config.preset_pause * 1000
                    )
                )

        ticker = self.context.scheduler.run_recurring(
            CROSSFADE_KEY, crossfade, self.config.crossfade_speed * 1000
        )
        self._handoff.append(ticker)

    def _start_random_preset(self) -> None:
        if self._rotation is None:
            return
        self._handoff = [task for task in self._handoff if task.active]
        preset = self.presets[int(self.context.rng.integers(len(self.presets)))]
        preset.init()
        preset.start()
        self.current_preset = preset

    def _cancel_handoff(self) -> None:
        for task in self._handoff:
            task.stop()
        self._handoff = []

    # Settings

    async def get_settings(self) -> GuirlandeDocument:
        """Return the settings record, creating it with a fresh code on first use"""
        async with self._settings_lock:
            doc = await self.context.store.guirlande.find_one()
            if doc is None:
                doc = await self.context.store.guirlande.create({"code": self._new_code()})
                logger.info("Created guirlande settings")
            return doc

    async def toggle_access(self) -> Access:
        doc = await self.get_settings()
        doc.access = Access.PUBLIC if doc.access is Access.PRIVATE else Access.PRIVATE
        await self.context.store.guirlande.save(doc)
        logger.info(f"Guirlande access set to {doc.access.name}")
        return doc.access

    async def generate_code(self) -> str:
        doc = await self.get_settings()
        doc.code = self._new_code()
        await self.context.store.guirlande.save(doc)
        logger.info("Generated a new guirlande access code")
        return doc.code

    async def get_code(self) -> str:
        return (await self.get_settings()).code

    async def info(self) -> Dict[str, Any]:
        doc = await self.get_settings()
        r, g, b = self._color.to_tuple()
        return {
            "access": int(doc.access),
            "color": {"hex": self._color.to_hex(), "r": r, "g": g, "b": b},
            "presets": self.presets_active,
        }

    async def check_access(self, user: Optional[Any], code: Optional[str]) -> None:
        """Authenticated users always pass; others need PUBLIC access and the code"""
        if user is not None:
            return
        doc = await self.get_settings()
        if (
            doc.access is Access.PUBLIC
            and code is not None
            and self.context.crypto.matches(doc.code, code)
        ):
            return
        raise AccessDeniedError("Guirlande access denied")

    def _new_code(self) -> str:
        return self.context.crypto.generate_random_numeric(self.config.code_length)
