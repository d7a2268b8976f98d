"""
Play clock for the minefield engine.

The clock's background thread never touches the engine. It posts tick
callbacks to a :class:`Dispatcher`, and whichever thread owns the engine
runs them between commands, so a tick can never interleave with a flag or
open.
"""
import logging
import queue
import threading
from typing import Callable, Optional

from .engine import GameState, MinefieldEngine


logger = logging.getLogger(__name__)

Task = Callable[[], None]


# ============================================================================
# Dispatcher
# ============================================================================

class Dispatcher:
    """Single-threaded work queue: any thread may post, one thread drains."""

    def __init__(self) -> None:
        self._tasks: "queue.Queue[Task]" = queue.Queue()

    def post(self, task: Task) -> None:
        """Schedule ``task`` to run on the draining thread."""
        self._tasks.put(task)

    def drain(self) -> int:
        """
        Run every task posted so far, in posting order.

        Returns:
            Number of tasks run.
        """
        ran = 0
        while True:
            try:
                task = self._tasks.get_nowait()
            except queue.Empty:
                return ran
            task()
            ran += 1

    def run_next(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for one task and run it.

        Returns:
            True if a task ran, False if the timeout expired first.
        """
        try:
            task = self._tasks.get(timeout=timeout)
        except queue.Empty:
            return False
        task()
        return True

    @property
    def pending(self) -> int:
        return self._tasks.qsize()


# ============================================================================
# Play Clock
# ============================================================================

class PlayClock:
    """
    Advances an engine's play time once per interval while it is playing.

    The clock stops itself as soon as the engine reaches a terminal state.

    Args:
        engine: Engine whose ``play_time`` is advanced.
        post: Schedules a tick on the engine's thread. Defaults to running
            the tick immediately, which is only safe single-threaded.
        interval: Seconds between ticks.
    """

    def __init__(
        self,
        engine: MinefieldEngine,
        post: Optional[Callable[[Task], None]] = None,
        interval: float = 1.0,
    ) -> None:
        if interval <= 0:
            raise ValueError("Clock interval must be positive")
        self.engine = engine
        self.interval = interval
        self._post = post or (lambda task: task())
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._dispose = engine.game_state.observe(self._on_game_state)

    def tick(self) -> bool:
        """
        Advance play time by one second.

        Returns:
            True if time advanced, False if the game is over.
        """
        if not self.engine.is_playing:
            self.stop()
            return False
        self.engine.play_time.value += 1
        return True

    def start(self) -> None:
        """Start posting ticks from a background thread."""
        if self._thread is not None:
            raise RuntimeError("Clock already started")
        if not self.engine.is_playing:
            return
        self._thread = threading.Thread(
            target=self._run, name="minefield-clock", daemon=True
        )
        self._thread.start()
        logger.debug("Clock started (interval %.3fs)", self.interval)

    def stop(self) -> None:
        """Stop ticking. Safe to call from any thread, any number of times."""
        if not self._stopped.is_set():
            self._stopped.set()
            self._dispose()
            logger.debug("Clock stopped at %ds", self.engine.play_time.value)

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._stopped.is_set()

    @property
    def alive(self) -> bool:
        """Whether the background thread is still running."""
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        while not self._stopped.wait(self.interval):
            self._post(self.tick)

    def _on_game_state(self, state: GameState) -> None:
        if state != GameState.PLAYING:
            self.stop()
