import random
from dataclasses import replace

import pygame
import pytest

import snake
from snake_state import (
    GRID_SIZE,
    INITIAL_FOOD,
    NOT_STARTED,
    OVER,
    RIGHT,
    RUNNING,
    initial_state,
)


class FakeTimer:
    def __init__(self):
        self.calls = []

    def __call__(self, event_type, interval_ms):
        self.calls.append((event_type, interval_ms))


def key_event(key):
    return pygame.event.Event(pygame.KEYDOWN, key=key)


@pytest.fixture
def fonts():
    pygame.font.init()
    yield (pygame.font.Font(None, 34), pygame.font.Font(None, 22), pygame.font.Font(None, 15))


def test_timer_armed_only_while_running():
    fake = FakeTimer()
    timer = snake.TickTimer(150, event_type=snake.TICK_EVENT, set_timer=fake)
    timer.sync(NOT_STARTED)
    assert fake.calls == []
    timer.sync(RUNNING)
    timer.sync(RUNNING)
    assert fake.calls == [(snake.TICK_EVENT, 150)]
    timer.sync(OVER)
    assert fake.calls[-1] == (snake.TICK_EVENT, 0)
    assert not timer.active


def test_timer_released_on_exit():
    fake = FakeTimer()
    with snake.TickTimer(90, set_timer=fake) as timer:
        timer.start()
    assert fake.calls == [(snake.TICK_EVENT, 90), (snake.TICK_EVENT, 0)]


def test_timer_rejects_bad_interval():
    with pytest.raises(ValueError):
        snake.TickTimer(0, set_timer=FakeTimer())


def test_tick_ms_from_env(monkeypatch):
    monkeypatch.delenv("SNAKE_TICK_MS", raising=False)
    assert snake.tick_ms_from_env() == 150
    monkeypatch.setenv("SNAKE_TICK_MS", "80")
    assert snake.tick_ms_from_env() == 80
    monkeypatch.setenv("SNAKE_TICK_MS", "-5")
    with pytest.raises(ValueError):
        snake.tick_ms_from_env()


def test_key_name_mapping():
    assert snake.key_name(pygame.K_SPACE) == "space"
    assert snake.key_name(pygame.K_LEFT) == "left"
    assert snake.key_name(pygame.K_a) is None


def test_events_drive_lifecycle():
    rng = random.Random(0)
    state = initial_state()
    state = snake.handle_event(state, key_event(pygame.K_SPACE), rng=rng)
    assert state.lifecycle == RUNNING

    state = snake.handle_event(state, key_event(pygame.K_RIGHT), rng=rng)
    assert state.pending_direction == RIGHT

    state = snake.handle_event(state, pygame.event.Event(snake.TICK_EVENT), rng=rng)
    assert state.snake == ((11, 10),)

    unchanged = snake.handle_event(state, key_event(pygame.K_a), rng=rng)
    assert unchanged is state


def test_reset_key_and_button_only_after_game_over():
    over = replace(initial_state(), lifecycle=OVER, game_over_reason="wall", score=20)
    assert snake.handle_event(over, key_event(pygame.K_r)) == initial_state()

    rect = snake.reset_button_rect()
    click = pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=rect.center)
    assert snake.handle_event(over, click, reset_rect=rect) == initial_state()

    miss = pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=(0, 0))
    assert snake.handle_event(over, miss, reset_rect=rect) is over

    running = replace(initial_state(), lifecycle=RUNNING)
    assert snake.handle_event(running, key_event(pygame.K_r)) is running


def test_draw_cells_paints_classifications():
    surface = pygame.Surface((snake.WINDOW_WIDTH, snake.WINDOW_HEIGHT))
    cells = [["empty"] * GRID_SIZE for _ in range(GRID_SIZE)]
    cells[0][0] = "head"
    cells[0][1] = "body"
    cells[5][4] = "food"
    snake.draw_cells(surface, cells)

    def color_at(pos):
        return tuple(surface.get_at(snake.grid_rect(pos).center))[:3]

    assert color_at((0, 0)) == snake.HEAD_COLOR
    assert color_at((1, 0)) == snake.BODY_COLOR
    assert color_at((4, 5)) == snake.FOOD_COLOR
    assert color_at((9, 9)) == snake.BOARD_BG


def test_draw_frame_shows_reset_button_only_when_over(fonts):
    surface = pygame.Surface((snake.WINDOW_WIDTH, snake.WINDOW_HEIGHT))
    state = initial_state()
    assert snake.draw_frame(surface, fonts, state) is None
    center = snake.grid_rect(INITIAL_FOOD).center
    assert tuple(surface.get_at(center))[:3] == snake.FOOD_COLOR

    over = replace(state, lifecycle=OVER, game_over_reason="self")
    rect = snake.draw_frame(surface, fonts, over)
    assert rect == snake.reset_button_rect()
    assert snake.board_rect().bottom < rect.top
