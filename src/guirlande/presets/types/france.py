from ..base import Preset
from ..color import Color
from ..transition import Transition

_SEQUENCE = [
    Color(255, 0, 0),
    Color(0, 0, 0),
    Color(255, 255, 255),
    Color(0, 0, 0),
    Color(0, 0, 255),
    Color(0, 0, 0),
]


class FrancePreset(Preset):
    """Fades through red, white and blue with black in between"""

    name = "France"
    speed = 0.03

    def init(self) -> None:
        self.color = Color(0, 0, 0)
        self.counter = 0
        self.transition = Transition(self.color, _SEQUENCE[0].copy(), self.speed, 1)

    def run(self) -> None:
        if self.transition.finished:
            self.counter = (self.counter + 1) % len(_SEQUENCE)
            target = _SEQUENCE[self.counter].copy()
            self.transition.reset(self.color, target, self.speed, 1)
        self.transition.run()
        self.set_color(self.color)
