from ..base import Preset
from ..color import Color


class CombustionPreset(Preset):
    """Alternates between black and a random ember color every tick"""

    name = "Combustion"
    speed = 300

    def _ember(self) -> Color:
        return self.random_color((128, 242), (9, 50), (9, 19))

    def init(self) -> None:
        self.color = self._ember()
        self.blink = True

    def run(self) -> None:
        if self.blink:
            self.set_color(Color(0, 0, 0))
        else:
            self.color = self._ember()
            self.set_color(self.color)
        self.blink = not self.blink
