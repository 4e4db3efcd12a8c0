from ..base import Preset
from ..color import Color
from ..transition import Transition


class MulticolorPreset(Preset):
    """Fades from black toward a new random color each time it arrives"""

    name = "Multicolor"
    speed = 0.05

    def _target(self) -> Color:
        return self.random_color((0, 255), (0, 255), (0, 255))

    def init(self) -> None:
        self.color = Color(0, 0, 0)
        self.transition = Transition(self.color, self._target(), self.speed, 1)

    def run(self) -> None:
        if self.transition.finished:
            self.transition.reset(self.color, self._target(), self.speed, 1)
        self.transition.run()
        self.set_color(self.color)
