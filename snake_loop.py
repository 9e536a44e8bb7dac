from __future__ import annotations

import enum
import logging
from typing import Callable, Optional, Protocol

from snake_core import GRID_SIZE, GameStatus, Heading, SnakeGame, SpeedLevel, StepResult


logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def schedule(self, interval_ms: int, callback: Callable[[], None]) -> TimerHandle: ...


class InputKey(enum.Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    PAUSE = "pause"


DIRECTION_KEYS: dict[InputKey, Heading] = {
    InputKey.UP: Heading.UP,
    InputKey.DOWN: Heading.DOWN,
    InputKey.LEFT: Heading.LEFT,
    InputKey.RIGHT: Heading.RIGHT,
}


class GameLoop:
    """Owns the game state and the repeating timer that drives ``SnakeGame.tick``.

    Lifecycle::

        idle --start--> running --stop--> paused --start--> running
        running --collision--> over --restart--> running

    ``start`` from idle or over reinitializes the board, ``start`` from paused
    resumes it. ``restart`` always reinitializes.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        level: SpeedLevel | str = SpeedLevel.MEDIUM,
        grid_size: int = GRID_SIZE,
        seed: int | None = None,
        listener: Optional[Callable[[SnakeGame], None]] = None,
    ):
        self.scheduler = scheduler
        self.level = SpeedLevel.parse(level)
        self.game = SnakeGame(grid_size, seed=seed)
        self.listener = listener
        self.final_score: int | None = None
        self._timer: TimerHandle | None = None

    @property
    def status(self) -> GameStatus:
        return self.game.status

    @property
    def score(self) -> int:
        return self.game.score

    @property
    def running(self) -> bool:
        return self.game.status is GameStatus.RUNNING

    @property
    def timer_armed(self) -> bool:
        return self._timer is not None

    # Display/control state, mirrors what the UI enables or shows.
    @property
    def game_over_visible(self) -> bool:
        return self.game.status is GameStatus.OVER

    @property
    def level_selectable(self) -> bool:
        return not self.running

    @property
    def start_enabled(self) -> bool:
        return not self.running

    @property
    def stop_enabled(self) -> bool:
        return self.running

    def start(self) -> None:
        if self.running:
            return
        if self.game.status in (GameStatus.IDLE, GameStatus.OVER):
            self._reinitialize()
        self.game.status = GameStatus.RUNNING
        self._arm()
        logger.info("game running at %s (%d ms)", self.level.value, self.level.interval_ms)

    def stop(self) -> None:
        if not self.running:
            return
        self._disarm()
        self.game.status = GameStatus.PAUSED
        logger.info("game paused at score %d", self.game.score)

    def restart(self) -> None:
        self._disarm()
        self._reinitialize()
        self.game.status = GameStatus.RUNNING
        self._arm()
        logger.info("game restarted at %s (%d ms)", self.level.value, self.level.interval_ms)

    def set_level(self, level: SpeedLevel | str) -> None:
        self.level = SpeedLevel.parse(level)
        if self.running:
            self._disarm()
            self._arm()
            logger.debug("timer re-armed at %d ms", self.level.interval_ms)

    def on_key(self, key: object) -> bool:
        """Handle one key press. Returns True when the key is one the game consumes."""
        if key is InputKey.PAUSE:
            if self.running:
                self.stop()
            elif self.game.status in (GameStatus.IDLE, GameStatus.PAUSED):
                self.start()
            return True
        heading = DIRECTION_KEYS.get(key) if isinstance(key, InputKey) else None
        if heading is None:
            return False
        if self.running:
            self.game.request_heading(heading)
        return True

    def on_timer(self) -> StepResult:
        result = self.game.tick()
        if result.over:
            self._disarm()
            self.final_score = self.game.score
        if self.running or result.over:
            self._notify()
        return result

    # Internal helpers.
    def _reinitialize(self) -> None:
        self.game.reset()
        self.final_score = None
        self._notify()

    def _arm(self) -> None:
        self._timer = self.scheduler.schedule(self.level.interval_ms, self.on_timer)

    def _disarm(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _notify(self) -> None:
        if self.listener is not None:
            self.listener(self.game)
