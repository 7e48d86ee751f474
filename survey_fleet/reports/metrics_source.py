"""Sources of survey metrics that are not derived from the mission record."""
import random
from typing import Optional


class RandomMetricsSource:
    """Mock sensor analytics drawn from bounded uniform distributions.

    Stands in for real post-flight processing. Replace with any object that
    exposes the same methods to plug in measured values.
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random(seed)

    def total_distance(self) -> float:
        """Kilometers flown, in [1, 6)."""
        return round((self.rng.random() * 5 + 1) * 100) / 100

    def area_covered(self) -> float:
        """Square kilometers, in [5, 25)."""
        return round((self.rng.random() * 20 + 5) * 100) / 100

    def images_captured(self) -> int:
        return int(self.rng.random() * 300 + 50)

    def battery_consumed(self) -> int:
        return int(self.rng.random() * 40 + 20)

    def image_overlap_percentage(self) -> int:
        return self.rng.randint(80, 100)

    def gps_accuracy(self) -> float:
        """Meters, in [1.0, 3.0] at one decimal."""
        return round((self.rng.random() * 2 + 1) * 10) / 10

    def sensor_data_points(self) -> int:
        return int(self.rng.random() * 1000 + 500)
