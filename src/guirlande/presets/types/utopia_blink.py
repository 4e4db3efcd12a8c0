from ..base import Preset

# Blink counter values at which the strip goes dark, then lights back up
_OFF_TICKS = (0, 40, 80)
_ON_TICKS = (-1, 20, 60)
_CYCLE = 120


class UtopiaBlinkPreset(Preset):
    """Ramps up to full yellow, blinks three times, then starts over"""

    name = "Utopia blink"
    speed = 0.03
    max_value = 255

    def init(self) -> None:
        self.value = 0
        self.blink = -1

    def run(self) -> None:
        if self.value < self.max_value:
            self.value += 1
        else:
            self.blink += 1

        if self.blink == _CYCLE:
            self.blink = -1
            self.value = 0

        if self.blink in _OFF_TICKS:
            self.set_color_rgb(0, 0, 0)
        elif self.blink in _ON_TICKS:
            self.set_color_rgb(self.value, self.value, 0)
