"""Ambient — the climate applied to freshly seeded or reset cells.

The ambient readings are what the user dials in before painting.  Every
painted cell copies them, and a reset fills the whole grid with them.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import ClassVar


@dataclass(frozen=True)
class Ambient:
    """Ambient climate readings.

    Attributes:
        temperature: Degrees Celsius.
        humidity: Percent.
        altitude: Elevation; every 10 units cool the effective
            temperature by one degree.
    """

    temperature: float = 15.0
    humidity: float = 50.0
    altitude: float = 50.0

    # (low, high, step) per reading, matching the control sliders
    LIMITS: ClassVar[dict[str, tuple[float, float, float]]] = {
        "temperature": (-10.0, 50.0, 1.0),
        "humidity": (0.0, 100.0, 5.0),
        "altitude": (0.0, 100.0, 5.0),
    }

    def nudged(self, reading: str, steps: int) -> Ambient:
        """Return a copy with one reading moved by whole slider steps.

        The result is clamped to the slider limits for that reading.

        Args:
            reading: ``"temperature"``, ``"humidity"`` or ``"altitude"``.
            steps: Signed number of slider steps to move.

        Raises:
            KeyError: If ``reading`` is not an ambient reading.
        """
        lo, hi, step = self.LIMITS[reading]
        value = getattr(self, reading) + steps * step
        return replace(self, **{reading: min(hi, max(lo, value))})
