import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

from ..common.text import slugify
from ..core.scheduler import TaskHandle
from .color import Color

if TYPE_CHECKING:
    from ..core.context import ServiceContext

logger = logging.getLogger(__name__)


class Preset(ABC):
    """Scheduler-driven animation of the guirlande color.

    Subclasses reset their own state in `init()` and put one tick of logic
    in `run()`, which is called every `speed` seconds while started.
    """

    name: str = "preset"
    speed: float = 0.1

    def __init__(
        self,
        context: "ServiceContext",
        name: Optional[str] = None,
        speed: Optional[float] = None,
    ):
        self.context = context
        if name is not None:
            self.name = name
        if speed is not None:
            self.speed = speed
        self.rng = context.rng
        self.key = f"preset-{slugify(self.name)}"
        self._task: Optional[TaskHandle] = None
        self.init()

    @abstractmethod
    def init(self) -> None:
        """Reset animation state; called before every start"""
        pass

    @abstractmethod
    def run(self) -> None:
        """One animation tick"""
        pass

    @property
    def is_running(self) -> bool:
        return self._task is not None

    def start(self) -> None:
        if self._task is None:
            self._task = self.context.scheduler.run_recurring(
                self.key, self.run, self.speed * 1000
            )
            logger.info(f"Preset {self.name} started")

    def stop(self) -> None:
        if self._task is not None:
            self._task.stop()
            self._task = None
            logger.info(f"Preset {self.name} stopped")

    def set_color(self, color: Color) -> None:
        self.context.guirlande.set_color(color)

    def set_color_rgb(self, r: int, g: int, b: int) -> None:
        self.context.guirlande.set_color_rgb(r, g, b)

    def random_color(self, r: tuple, g: tuple, b: tuple) -> Color:
        """Random color with each channel drawn from an inclusive range"""
        return Color(
            self.rng.integers(r[0], r[1], endpoint=True),
            self.rng.integers(g[0], g[1], endpoint=True),
            self.rng.integers(b[0], b[1], endpoint=True),
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, speed={self.speed})"
