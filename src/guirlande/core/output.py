import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Tuple

import numpy as np

from .config import GuirlandeConfig

logger = logging.getLogger(__name__)


@dataclass
class OutputState:
    """Last values written to each channel"""

    channels: Dict[int, int] = field(default_factory=dict)
    last_update: float = field(default_factory=time.time)
    write_count: int = 0


class ColorOutput(ABC):
    """Abstract base class for the guirlande's three-channel output"""

    def __init__(self, pins: Tuple[int, int, int]):
        self.pins = pins
        self._state = OutputState(channels={pin: 0 for pin in pins})

    @abstractmethod
    def write_channel(self, pin: int, value: int) -> None:
        """Write one channel (0-255)"""
        pass

    @abstractmethod
    def cleanup(self) -> None:
        """Release hardware resources"""
        pass

    def read_channel(self, pin: int) -> int:
        return self._state.channels.get(pin, 0)

    def _record(self, pin: int, value: int) -> None:
        self._state.channels[pin] = value
        self._state.last_update = time.time()
        self._state.write_count += 1


class MockColorOutput(ColorOutput):
    """Mock output for development without hardware"""

    def __init__(self, pins: Tuple[int, int, int]):
        super().__init__(pins)
        logger.info(f"Initialized mock color output on pins {pins}")

    def write_channel(self, pin: int, value: int) -> None:
        value = int(np.clip(value, 0, 255))
        self._record(pin, value)

    def cleanup(self) -> None:
        for pin in self.pins:
            self._record(pin, 0)
        logger.info("Mock color output cleaned up")


class GPIOColorOutput(ColorOutput):
    """Software PWM output on Raspberry Pi GPIO pins"""

    def __init__(self, pins: Tuple[int, int, int], frequency: int):
        try:
            import RPi.GPIO as GPIO
        except ImportError as e:
            logger.error(f"Failed to import RPi.GPIO: {e}")
            raise

        super().__init__(pins)
        self._gpio = GPIO
        self._gpio.setmode(GPIO.BCM)
        self._pwm = {}
        for pin in pins:
            self._gpio.setup(pin, GPIO.OUT)
            pwm = self._gpio.PWM(pin, frequency)
            pwm.start(0)
            self._pwm[pin] = pwm
        logger.info(f"Initialized GPIO color output on pins {pins} at {frequency}Hz")

    def write_channel(self, pin: int, value: int) -> None:
        value = int(np.clip(value, 0, 255))
        self._pwm[pin].ChangeDutyCycle(value * 100 / 255)
        self._record(pin, value)

    def cleanup(self) -> None:
        try:
            for pwm in self._pwm.values():
                pwm.stop()
            self._gpio.cleanup(list(self.pins))
            logger.info("GPIO color output cleaned up")
        except Exception as e:
            logger.error(f"Error during GPIO cleanup: {e}")


def create_output(config: GuirlandeConfig) -> ColorOutput:
    """Create the output selected by configuration"""
    if config.output == "gpio":
        return GPIOColorOutput(config.pins, config.pwm_frequency)
    return MockColorOutput(config.pins)
