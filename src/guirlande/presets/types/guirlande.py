from ..base import Preset
from ..color import Color
from ..transition import Transition

FADE_IN = Color(146, 66, 254)
FADE_OUT = Color(46, 0, 154)


class GuirlandePreset(Preset):
    """Breathes between a light and a deep purple on a ten second cycle.

    Halfway through the cycle a quicker fade toward the deep purple is
    forced; whenever a fade completes the preset heads back to the light one.
    """

    name = "Guirlande"
    speed = 0.05

    def init(self) -> None:
        self.color = Color(0, 0, 0)
        self.counter = 0
        self.half_cycle = round(5 / self.speed)
        self.full_cycle = round(10 / self.speed)
        self.transition = Transition(self.color, FADE_IN.copy(), self.speed, 1)

    def run(self) -> None:
        if self.counter == self.half_cycle:
            self.transition.reset(self.color, FADE_OUT.copy(), self.speed, 0.3)
        if self.transition.finished:
            self.transition.reset(self.color, FADE_IN.copy(), self.speed, 1)
        if self.counter == self.full_cycle:
            self.counter = 0
        else:
            self.counter += 1
        self.transition.run()
        self.set_color(self.color)
