from ..base import Preset
from ..color import Color


class PurpleFadePreset(Preset):
    """Moves each channel one unit per tick toward a random purple"""

    name = "Purple fade"
    speed = 20

    def _target(self) -> Color:
        return self.random_color((0, 200), (0, 50), (0, 255))

    def init(self) -> None:
        self.target = self._target()
        self.current = Color()

    def run(self) -> None:
        if self.current.equals_color(self.target):
            self.target = self._target()
        for channel in ("r", "g", "b"):
            current = getattr(self.current, channel)
            goal = getattr(self.target, channel)
            if current < goal:
                setattr(self.current, channel, current + 1)
            elif current > goal:
                setattr(self.current, channel, current - 1)
        self.set_color(self.current)
