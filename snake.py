import logging
import os
import random
import sys

import pygame

from snake_state import (
    BODY,
    EMPTY,
    FOOD,
    GRID_SIZE,
    HEAD,
    OVER,
    RUNNING,
    TICK_MS,
    classify_cells,
    handle_key,
    initial_state,
    reset_game,
    status_lines,
    step,
)

logger = logging.getLogger(__name__)

# Window configuration
CELL_SIZE = 20
BOARD_PADDING = 8
HUD_HEIGHT = 80
STATUS_HEIGHT = 220
BOARD_PIXELS = GRID_SIZE * CELL_SIZE
WINDOW_WIDTH = BOARD_PIXELS + 2 * BOARD_PADDING + 80
WINDOW_HEIGHT = HUD_HEIGHT + BOARD_PIXELS + 2 * BOARD_PADDING + STATUS_HEIGHT
BOARD_LEFT = (WINDOW_WIDTH - BOARD_PIXELS) // 2
BOARD_TOP = HUD_HEIGHT + BOARD_PADDING
FPS = 60

# Colors (R, G, B)
BG_COLOR = (0, 0, 0)
BOARD_BG = (17, 24, 39)
GRID_LINE = (31, 41, 55)
BORDER_COLOR = (74, 222, 128)
HEAD_COLOR = (74, 222, 128)
BODY_COLOR = (22, 163, 74)
FOOD_COLOR = (239, 68, 68)
TITLE_COLOR = (74, 222, 128)
GAME_OVER_COLOR = (248, 113, 113)
HINT_COLOR = (156, 163, 175)
BUTTON_COLOR = (22, 163, 74)
BUTTON_HOVER = (21, 128, 61)
WHITE = (240, 240, 240)

CELL_COLORS = {
    EMPTY: BOARD_BG,
    BODY: BODY_COLOR,
    HEAD: HEAD_COLOR,
    FOOD: FOOD_COLOR,
}

KEY_NAMES = {
    pygame.K_SPACE: "space",
    pygame.K_UP: "up",
    pygame.K_DOWN: "down",
    pygame.K_LEFT: "left",
    pygame.K_RIGHT: "right",
}
RESET_KEYS = (pygame.K_r, pygame.K_RETURN)
TICK_EVENT = pygame.USEREVENT + 1


def tick_ms_from_env(default=TICK_MS):
    """Read the tick period from SNAKE_TICK_MS, falling back to the default."""
    raw = os.environ.get("SNAKE_TICK_MS")
    if not raw:
        return default
    value = int(raw)
    if value <= 0:
        raise ValueError("SNAKE_TICK_MS must be a positive number of milliseconds.")
    return value


class TickTimer:
    """Periodic tick event that only exists while the game is running."""

    def __init__(self, interval_ms, event_type=TICK_EVENT, set_timer=None):
        if interval_ms <= 0:
            raise ValueError("Tick interval must be positive.")
        self.interval_ms = interval_ms
        self.event_type = event_type
        self._set_timer = set_timer or pygame.time.set_timer
        self.active = False

    def start(self):
        if self.active:
            return
        self._set_timer(self.event_type, self.interval_ms)
        self.active = True
        logger.debug("Tick timer armed (%d ms)", self.interval_ms)

    def stop(self):
        if not self.active:
            return
        self._set_timer(self.event_type, 0)
        self.active = False
        logger.debug("Tick timer disarmed")

    def sync(self, lifecycle):
        """Arm on entering the running state, disarm on leaving it."""
        if lifecycle == RUNNING:
            self.start()
        else:
            self.stop()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False


def key_name(key):
    """Translate a pygame key constant to the name the game rules use."""
    return KEY_NAMES.get(key)


def get_ui_font(size):
    """Load a preferred UI font, then fall back safely to pygame default."""
    preferred = ["Bahnschrift", "Segoe UI", "DejaVu Sans", "Arial"]
    for name in preferred:
        path = pygame.font.match_font(name)
        if path:
            return pygame.font.Font(path, size)
    return pygame.font.Font(None, size)


def grid_rect(grid_pos, padding=0):
    """Return a pixel rectangle for a grid position."""
    x, y = grid_pos
    return pygame.Rect(
        BOARD_LEFT + x * CELL_SIZE + padding,
        BOARD_TOP + y * CELL_SIZE + padding,
        CELL_SIZE - padding * 2,
        CELL_SIZE - padding * 2,
    )


def board_rect():
    return pygame.Rect(BOARD_LEFT, BOARD_TOP, BOARD_PIXELS, BOARD_PIXELS)


def draw_background(surface):
    """Fill the window and frame the board."""
    surface.fill(BG_COLOR)
    frame = board_rect().inflate(BOARD_PADDING * 2, BOARD_PADDING * 2)
    pygame.draw.rect(surface, BOARD_BG, frame)
    pygame.draw.rect(surface, BORDER_COLOR, frame, 2)


def draw_cells(surface, cells):
    """Paint each classified cell with a thin grid outline."""
    for y, row in enumerate(cells):
        for x, kind in enumerate(row):
            rect = grid_rect((x, y))
            pygame.draw.rect(surface, CELL_COLORS[kind], rect)
            pygame.draw.rect(surface, GRID_LINE, rect, 1)


def draw_hud(surface, title_font, font, score):
    title = title_font.render("Dot Snake", True, TITLE_COLOR)
    surface.blit(title, title.get_rect(centerx=WINDOW_WIDTH // 2, y=10))

    label = font.render("Score: ", True, WHITE)
    value = font.render(str(score), True, TITLE_COLOR)
    total_w = label.get_width() + value.get_width()
    x = WINDOW_WIDTH // 2 - total_w // 2
    y = 10 + title.get_height() + 4
    surface.blit(label, (x, y))
    surface.blit(value, (x + label.get_width(), y))


def reset_button_rect():
    rect = pygame.Rect(0, 0, 150, 36)
    rect.center = (WINDOW_WIDTH // 2, WINDOW_HEIGHT - 36)
    return rect


def draw_reset_button(surface, font, hovered=False):
    """Draw the restart control shown after game over."""
    rect = reset_button_rect()
    pygame.draw.rect(surface, BUTTON_HOVER if hovered else BUTTON_COLOR, rect, border_radius=8)
    label = font.render("Restart", True, WHITE)
    surface.blit(label, label.get_rect(center=rect.center))
    return rect


def draw_status(surface, font, small_font, state):
    """Draw lifecycle prompts below the board."""
    y = BOARD_TOP + BOARD_PIXELS + BOARD_PADDING + 14
    for i, line in enumerate(status_lines(state)):
        if i == 0 and state.lifecycle == OVER:
            text = font.render(line, True, GAME_OVER_COLOR)
        elif i == 0:
            text = font.render(line, True, WHITE)
        else:
            text = small_font.render(line, True, HINT_COLOR)
        surface.blit(text, text.get_rect(centerx=WINDOW_WIDTH // 2, y=y))
        y += text.get_height() + 4


def draw_frame(surface, fonts, state, mouse_pos=None):
    """Render one full frame; returns the reset button rect when it is shown."""
    title_font, font, small_font = fonts
    draw_background(surface)
    draw_cells(surface, classify_cells(state.snake, state.food))
    draw_hud(surface, title_font, font, state.score)
    draw_status(surface, font, small_font, state)

    if state.lifecycle != OVER:
        return None
    hovered = mouse_pos is not None and reset_button_rect().collidepoint(mouse_pos)
    return draw_reset_button(surface, font, hovered)


def handle_event(state, event, reset_rect=None, tick_event=TICK_EVENT, rng=random):
    """Apply one pygame event to the game state."""
    if event.type == tick_event:
        return step(state, rng)
    if event.type == pygame.KEYDOWN:
        if event.key in RESET_KEYS:
            return reset_game(state)
        name = key_name(event.key)
        if name is None:
            return state
        return handle_key(state, name)
    if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
        if reset_rect is not None and reset_rect.collidepoint(event.pos):
            return reset_game(state)
    return state


def main(tick_ms=None):
    logging.basicConfig(
        level=os.environ.get("SNAKE_LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if tick_ms is None:
        tick_ms = tick_ms_from_env()

    pygame.init()
    pygame.display.set_caption("Dot Snake")
    screen = pygame.display.set_mode((WINDOW_WIDTH, WINDOW_HEIGHT))
    clock = pygame.time.Clock()
    fonts = (get_ui_font(34), get_ui_font(22), get_ui_font(15))
    state = initial_state()
    reset_rect = None
    logger.info("Window ready, tick period %d ms", tick_ms)

    with TickTimer(tick_ms) as timer:
        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                    break
                if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    running = False
                    break
                state = handle_event(state, event, reset_rect, timer.event_type)
                timer.sync(state.lifecycle)

            if not running:
                break
            reset_rect = draw_frame(screen, fonts, state, pygame.mouse.get_pos())
            pygame.display.flip()
            clock.tick(FPS)

    pygame.quit()


if __name__ == "__main__":
    sys.exit(main())
