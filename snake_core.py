from __future__ import annotations

import enum
import logging
import random
from collections import deque
from typing import Deque, Iterable, NamedTuple, Tuple


logger = logging.getLogger(__name__)

CANVAS_SIZE = 400
CELL_SIZE = 20
GRID_SIZE = CANVAS_SIZE // CELL_SIZE
SNAKE_INITIAL_LENGTH = 3
FOOD_REWARD = 10

Cell = Tuple[int, int]


class Heading(enum.Enum):
    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def opposite(self) -> "Heading":
        dx, dy = self.value
        return Heading((-dx, -dy))


class GameStatus(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    OVER = "over"


class SpeedLevel(enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value: SpeedLevel | str) -> SpeedLevel:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            names = ", ".join(level.value for level in cls)
            raise ValueError(f"unknown speed level {value!r} (expected one of: {names})") from None

    @property
    def interval_ms(self) -> int:
        return SPEED_INTERVALS_MS[self]


# Milliseconds between ticks.
SPEED_INTERVALS_MS: dict[SpeedLevel, int] = {
    SpeedLevel.EASY: 150,
    SpeedLevel.MEDIUM: 100,
    SpeedLevel.HARD: 70,
}


class StepResult(NamedTuple):
    state: "SnakeGame"
    eaten: bool
    collided: bool
    # No free interior cell is left for the next food; the game ends on this tick.
    filled: bool = False

    @property
    def over(self) -> bool:
        return self.collided or self.filled


def initial_snake(grid_size: int = GRID_SIZE, length: int = SNAKE_INITIAL_LENGTH) -> Deque[Cell]:
    center = grid_size // 2
    return deque([(center - i, center) for i in range(length)])


def place_food(snake: Iterable[Cell], grid_size: int, rng: random.Random) -> Cell | None:
    """Pick a random interior cell (both coordinates in [1, N-2]) not covered by the snake.

    Returns None when the snake already covers every interior cell.
    """
    occupied = set(snake)
    low, high = 1, grid_size - 2
    interior = max(0, high - low + 1) ** 2
    covered = sum(1 for x, y in occupied if low <= x <= high and low <= y <= high)
    if covered >= interior:
        return None
    while True:
        cell = (rng.randint(low, high), rng.randint(low, high))
        if cell not in occupied:
            logger.debug("food placed at %s", cell)
            return cell


class SnakeGame:
    """Mutable state of one snake game on a square grid, plus its per-tick transition."""

    def __init__(self, grid_size: int = GRID_SIZE, seed: int | None = None):
        if grid_size < 5:
            raise ValueError("grid_size must fit the starting snake and a free interior cell")
        self.grid_size = grid_size
        self.rng = random.Random(seed)
        self.snake: Deque[Cell] = deque()
        self.food: Cell | None = (0, 0)
        self.score = 0
        self.current = Heading.RIGHT
        self.pending = Heading.RIGHT
        self.status = GameStatus.IDLE
        self.reset()

    def __len__(self) -> int:
        return len(self.snake)

    @property
    def head(self) -> Cell:
        return self.snake[0]

    def reset(self, seed: int | None = None) -> None:
        """Fresh snake, headings, score and food. Leaves ``status`` to the caller."""
        if seed is not None:
            self.rng.seed(seed)
        self.snake = initial_snake(self.grid_size)
        self.current = Heading.RIGHT
        self.pending = Heading.RIGHT
        self.score = 0
        self.food = place_food(self.snake, self.grid_size, self.rng)

    def request_heading(self, heading: Heading) -> bool:
        # Reversals are dropped; the check is against the heading in force, not the pending one.
        if heading is self.current.opposite:
            return False
        self.pending = heading
        return True

    def tick(self) -> StepResult:
        if self.status is not GameStatus.RUNNING:
            return StepResult(self, False, False)

        self.current = self.pending
        head_x, head_y = self.head
        dx, dy = self.current.value
        new_head = (head_x + dx, head_y + dy)

        if self._would_collide(new_head):
            self.status = GameStatus.OVER
            logger.info("collision at %s, final score %d", new_head, self.score)
            return StepResult(self, False, True)

        self.snake.appendleft(new_head)
        if new_head == self.food:
            self.score += FOOD_REWARD
            self.food = place_food(self.snake, self.grid_size, self.rng)
            if self.food is None:
                self.status = GameStatus.OVER
                logger.info("board filled, final score %d", self.score)
                return StepResult(self, True, False, filled=True)
            return StepResult(self, True, False)
        self.snake.pop()
        return StepResult(self, False, False)

    def in_bounds(self, pos: Cell) -> bool:
        x, y = pos
        return 0 <= x < self.grid_size and 0 <= y < self.grid_size

    # Internal helpers.
    def _would_collide(self, pos: Cell) -> bool:
        if not self.in_bounds(pos):
            return True
        # Checked against the whole body before the tail moves, so the cell the tail
        # is about to vacate still counts as occupied.
        return pos in self.snake
