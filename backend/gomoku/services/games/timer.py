import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)

TURN_DURATION_SEC = 60


class TurnTimer:
    """Per-room turn countdown.

    - ``restart`` supersedes any running countdown and emits the fresh value
    - ``tick`` counts down by one second; at zero the timer cancels itself
      and calls ``on_expire``
    - ``cancel`` stops the countdown; no tick is emitted afterwards

    Each restart/cancel bumps ``generation``. A background loop only ticks
    while its generation is current, so a superseded loop exits on its next
    wake-up without touching the room.

    When ``start_task`` is None no background loop is spawned and the
    countdown is driven by calling :meth:`tick` directly.
    """

    def __init__(
        self,
        on_tick: Callable[[int], None],
        on_expire: Callable[[], None],
        duration: int = TURN_DURATION_SEC,
        lock=None,
        start_task: Optional[Callable] = None,
        sleep: Optional[Callable[[float], None]] = None,
        heartbeat_sec: int = 0,
        label: str = '',
    ):
        self.duration = duration
        self.remaining = duration
        self.generation = 0
        self.active = False
        self._on_tick = on_tick
        self._on_expire = on_expire
        self._lock = lock if lock is not None else threading.RLock()
        self._start_task = start_task
        self._sleep = sleep
        self._heartbeat_sec = heartbeat_sec
        self._label = label

    def restart(self) -> None:
        with self._lock:
            self.generation += 1
            self.active = True
            self.remaining = self.duration
            generation = self.generation
            logger.debug(f"[timer-set] room={self._label} gen={generation} duration={self.duration}s")
            self._on_tick(self.remaining)
        if self._start_task is not None:
            self._start_task(self._worker, generation)

    def cancel(self) -> None:
        with self._lock:
            if self.active:
                logger.debug(f"[timer-cancel] room={self._label} gen={self.generation}")
            self.generation += 1
            self.active = False

    def tick(self) -> bool:
        """Advance the countdown by one second. Returns False when inactive."""
        with self._lock:
            if not self.active:
                return False
            self.remaining -= 1
            self._on_tick(self.remaining)
            if self.remaining <= 0:
                logger.info(f"[timer-expire] room={self._label} gen={self.generation}")
                self.cancel()
                self._on_expire()
            return True

    def _worker(self, generation: int) -> None:
        elapsed = 0
        while True:
            self._sleep(1)
            elapsed += 1
            with self._lock:
                if not self.active or self.generation != generation:
                    logger.debug(f"[timer-abort] room={self._label} gen={generation} superseded")
                    return
                self.tick()
                if self._heartbeat_sec and elapsed % self._heartbeat_sec == 0 and self.generation == generation:
                    logger.info(f"[timer-heartbeat] room={self._label} gen={generation} remaining={self.remaining}s")
