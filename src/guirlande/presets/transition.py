from enum import Enum, auto
from typing import List

import numpy as np

from .color import Color


class TransitionState(Enum):
    """Transition states"""

    INIT = auto()
    RUNNING = auto()
    FINISHED = auto()


class Transition:
    """Tick-driven linear fade of a color toward a target.

    The transition owns the color it is given and mutates it in place on
    every `run()`; other holders must treat it as read-only. Progress is
    counted in ticks, so `run()` must be called at the `speed` used to
    compute the steps.
    """

    def __init__(self, color: Color, target: Color, speed: float, duration: float):
        self.reset(color, target, speed, duration)

    def reset(self, color: Color, target: Color, speed: float, duration: float) -> None:
        """Restart toward `target`.

        Args:
            color: Color to update
            target: Target color
            speed: Tick interval (in seconds)
            duration: Duration factor
        """
        self.state = TransitionState.INIT
        self.color = color
        self.target = target
        self.steps = self._calculate_steps(color, target, speed * 1000, duration)

    def run(self) -> None:
        """Advance one tick"""
        if self.state is TransitionState.INIT:
            self.state = TransitionState.RUNNING
            return
        if self.state is TransitionState.FINISHED:
            return

        if not any(self.steps):
            self.state = TransitionState.FINISHED
            return

        channels = ["r", "g", "b"]
        for i, channel in enumerate(channels):
            step = self.steps[i]
            if step == 0:
                continue
            current = getattr(self.color, channel)
            goal = getattr(self.target, channel)
            if current > goal:
                current = max(current - step, goal)
            else:
                current = min(current + step, goal)
            setattr(self.color, channel, current)
            if current == goal:
                self.steps[i] = 0

    @property
    def finished(self) -> bool:
        return self.state is TransitionState.FINISHED

    @staticmethod
    def _calculate_steps(
        color: Color, target: Color, speed_ms: float, duration: float
    ) -> List[int]:
        distance = color.distance(target).to_array()
        steps = np.floor(distance / (speed_ms * duration)).astype(np.int64)
        return [int(step) for step in np.maximum(steps, 1)]
