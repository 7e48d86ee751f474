"""Injectable randomness for the progress simulator."""
import random
from typing import Optional

from survey_fleet.config import Settings, get_settings


class SimulationRandomSource:
    """Bounded random draws used by each simulator tick.

    Subclass and override the draw methods to make ticks deterministic.
    """

    def __init__(self, settings: Optional[Settings] = None, seed: Optional[int] = None):
        self.settings = settings or get_settings()
        self.rng = random.Random(seed)

    def progress_increment(self) -> float:
        """Percent of the mission completed this tick, in [0, max_progress_increment)."""
        return self.rng.random() * self.settings.max_progress_increment

    def battery_drain(self) -> float:
        """Percent of battery used this tick, in [0, max_battery_drain)."""
        return self.rng.random() * self.settings.max_battery_drain

    def location_jitter(self) -> float:
        """Degrees of positional noise, centered on zero."""
        return (self.rng.random() - 0.5) * self.settings.location_jitter_degrees

    def altitude_jitter(self) -> float:
        """Meters of altitude noise, centered on zero."""
        return (self.rng.random() - 0.5) * self.settings.altitude_jitter_meters
