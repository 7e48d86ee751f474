"""Background thread that ticks the progress simulator on a fixed interval."""
import logging
import threading
from typing import Optional

from survey_fleet.simulation.progress_simulator import ProgressSimulator

logger = logging.getLogger(__name__)


class SimulationRunner:
    """Calls ProgressSimulator.tick every `interval` seconds until stopped."""

    def __init__(self, simulator: ProgressSimulator, interval: float = 5.0,
                 organization_id: Optional[str] = None):
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.simulator = simulator
        self.interval = interval
        self.organization_id = organization_id
        self._stop_evt = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_evt.clear()
        self._thread = threading.Thread(target=self._loop, name="simulation-runner", daemon=True)
        self._thread.start()
        logger.info("Simulation runner started (every %.1fs)", self.interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_evt.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout if timeout is not None else self.interval * 2)
        self._thread = None
        logger.info("Simulation runner stopped")

    def _loop(self) -> None:
        while not self._stop_evt.wait(self.interval):
            try:
                result = self.simulator.tick(self.organization_id)
            except Exception:
                logger.exception("Simulation tick failed")
                continue
            if result.errors:
                logger.warning("Simulation tick finished with %d errors", len(result.errors))
