from ..base import Preset


class EpilepsyPreset(Preset):
    name = "Epilepsy"
    speed = 0.075

    def init(self) -> None:
        pass

    def run(self) -> None:
        r, g, b = self.rng.integers(0, 255, size=3, endpoint=True)
        self.set_color_rgb(r, g, b)
