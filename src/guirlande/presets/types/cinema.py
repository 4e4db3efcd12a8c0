from ..base import Preset
from ..transition import Transition


class CinemaPreset(Preset):
    """Slow random drift between dim reds"""

    name = "Cinema"
    speed = 0.03

    def _target(self):
        return self.random_color((50, 150), (0, 0), (0, 0))

    def init(self) -> None:
        self.color = self._target()
        self.transition = Transition(self.color, self._target(), self.speed, 1)

    def run(self) -> None:
        if self.transition.finished:
            self.transition.reset(self.color, self._target(), self.speed, 1)
        self.transition.run()
        self.set_color(self.color)
