from __future__ import annotations

import argparse
import logging
from typing import Callable

import pygame

from snake_core import CANVAS_SIZE, CELL_SIZE, GameStatus, SnakeGame, SpeedLevel
from snake_loop import GameLoop, InputKey


SCREEN_WIDTH = CANVAS_SIZE
SCREEN_HEIGHT = CANVAS_SIZE
FONT_NAME = "arial"
FRAME_RATE = 60

BACKGROUND_COLOR = pygame.Color("#111111")
GRID_LINE_COLOR = pygame.Color("#222222")
HEAD_COLOR = pygame.Color("#4CAF50")
BODY_COLOR = pygame.Color("#2E7D32")
FOOD_COLOR = pygame.Color("#F44336")

KEY_BINDINGS = {
    pygame.K_UP: InputKey.UP,
    pygame.K_DOWN: InputKey.DOWN,
    pygame.K_LEFT: InputKey.LEFT,
    pygame.K_RIGHT: InputKey.RIGHT,
    pygame.K_SPACE: InputKey.PAUSE,
}

LEVEL_KEYS = {
    pygame.K_1: SpeedLevel.EASY,
    pygame.K_2: SpeedLevel.MEDIUM,
    pygame.K_3: SpeedLevel.HARD,
}


class PygameTimer:
    def __init__(self, scheduler: PygameScheduler):
        self._scheduler = scheduler

    def cancel(self) -> None:
        self._scheduler.clear(self)


class PygameScheduler:
    """Repeating timer backed by ``pygame.time.set_timer`` and one custom event type.

    Each ``schedule`` call tags its events with a fresh generation number, so
    events posted by a cancelled or replaced timer are ignored by ``dispatch``.
    """

    def __init__(self, event_type: int = pygame.USEREVENT + 1):
        self.event_type = event_type
        self.generation = 0
        self._active: PygameTimer | None = None
        self._event: pygame.event.Event | None = None
        self._callback: Callable[[], None] | None = None

    def schedule(self, interval_ms: int, callback: Callable[[], None]) -> PygameTimer:
        self.generation += 1
        timer = PygameTimer(self)
        self._active = timer
        self._callback = callback
        self._event = pygame.event.Event(self.event_type, generation=self.generation)
        pygame.time.set_timer(self._event, interval_ms)
        return timer

    def clear(self, timer: PygameTimer) -> None:
        if timer is not self._active:
            return
        pygame.time.set_timer(self._event, 0)
        self._active = None
        self._event = None
        self._callback = None

    def dispatch(self, event: pygame.event.Event) -> bool:
        if event.type != self.event_type:
            return False
        if self._callback is not None and getattr(event, "generation", None) == self.generation:
            self._callback()
        return True


def draw_block(surface: pygame.Surface, color: pygame.Color, position: tuple[int, int], cell_size: int = CELL_SIZE) -> None:
    rect = pygame.Rect(position[0] * cell_size, position[1] * cell_size, cell_size, cell_size)
    pygame.draw.rect(surface, color, rect)
    pygame.draw.rect(surface, BACKGROUND_COLOR, rect, 1)


def draw_board(surface: pygame.Surface, game: SnakeGame, cell_size: int = CELL_SIZE) -> None:
    surface.fill(BACKGROUND_COLOR)
    for idx, part in enumerate(game.snake):
        draw_block(surface, HEAD_COLOR if idx == 0 else BODY_COLOR, part, cell_size)

    if game.food is not None:
        radius = cell_size // 2
        center = (game.food[0] * cell_size + radius, game.food[1] * cell_size + radius)
        pygame.draw.circle(surface, FOOD_COLOR, center, radius)

    width, height = surface.get_size()
    for i in range(game.grid_size):
        pygame.draw.line(surface, GRID_LINE_COLOR, (i * cell_size, 0), (i * cell_size, height))
        pygame.draw.line(surface, GRID_LINE_COLOR, (0, i * cell_size), (width, i * cell_size))


def draw_overlay(surface: pygame.Surface, font: pygame.font.Font, lines: list[str]) -> None:
    overlay = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
    overlay.fill((0, 0, 0, 160))
    surface.blit(overlay, (0, 0))
    width, height = surface.get_size()
    top = height // 2 - (len(lines) * 28) // 2
    for i, text in enumerate(lines):
        msg = font.render(text, True, pygame.Color("white"))
        rect = msg.get_rect(center=(width // 2, top + i * 28 + 14))
        surface.blit(msg, rect)


def draw_hud(surface: pygame.Surface, font: pygame.font.Font, loop: GameLoop) -> None:
    score_text = font.render(f"Score: {loop.score}", True, pygame.Color("white"))
    level_text = font.render(f"Level: {loop.level.value}", True, pygame.Color("gray70"))
    surface.blit(score_text, (10, 10))
    surface.blit(level_text, (10, 36))

    if loop.game_over_visible:
        draw_overlay(surface, font, ["Game Over", f"Final score: {loop.final_score}", "R to restart, Esc to quit"])
    elif loop.status is GameStatus.PAUSED:
        draw_overlay(surface, font, ["Paused", "Space to resume"])
    elif loop.status is GameStatus.IDLE:
        draw_overlay(surface, font, ["Snake", "Enter to start, 1/2/3 for level"])


def handle_keydown(loop: GameLoop, key: int) -> bool:
    """Route one pygame key to the loop. Returns False when the player asked to quit."""
    if key in (pygame.K_ESCAPE, pygame.K_q):
        return False
    if loop.on_key(KEY_BINDINGS.get(key)):
        return True
    if key == pygame.K_RETURN:
        loop.start()
    elif key == pygame.K_r:
        loop.restart()
    elif key in LEVEL_KEYS and loop.level_selectable:
        loop.set_level(LEVEL_KEYS[key])
    return True


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play Snake on a 20x20 grid.")
    parser.add_argument(
        "--level",
        type=SpeedLevel.parse,
        default=SpeedLevel.MEDIUM,
        choices=list(SpeedLevel),
        metavar="{easy,medium,hard}",
        help="Starting speed level.",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for food placement.")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Logging level (DEBUG, INFO, ...).")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")

    pygame.init()
    screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
    pygame.display.set_caption("Snake")
    clock = pygame.time.Clock()
    font = pygame.font.SysFont(FONT_NAME, 24)

    def update_caption(game: SnakeGame) -> None:
        pygame.display.set_caption(f"Snake - Score: {game.score}")

    scheduler = PygameScheduler()
    loop = GameLoop(scheduler, level=args.level, seed=args.seed, listener=update_caption)

    running = True
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if not handle_keydown(loop, event.key):
                    running = False
            else:
                scheduler.dispatch(event)

        draw_board(screen, loop.game)
        draw_hud(screen, font, loop)
        pygame.display.flip()
        clock.tick(FRAME_RATE)

    loop.stop()
    pygame.quit()
    print(f"[game] status={loop.status.value} score={loop.score} level={loop.level.value}")


if __name__ == "__main__":
    main()
