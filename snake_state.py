"""Game rules for Dot Snake: an immutable state record and pure transitions."""

import logging
import random
from dataclasses import dataclass, replace

logger = logging.getLogger(__name__)

# Board and timing configuration
GRID_SIZE = 20
TICK_MS = 150
SCORE_PER_FOOD = 10
FOOD_SAMPLE_ATTEMPTS = 64

# Direction vectors (dx, dy); y grows downward like screen coordinates.
UP = (0, -1)
DOWN = (0, 1)
LEFT = (-1, 0)
RIGHT = (1, 0)
DIRECTIONS = (UP, DOWN, LEFT, RIGHT)

KEY_TO_DIRECTION = {
    "up": UP,
    "down": DOWN,
    "left": LEFT,
    "right": RIGHT,
}
START_KEY = "space"

INITIAL_SNAKE = ((10, 10),)
INITIAL_FOOD = (15, 15)
INITIAL_DIRECTION = UP

# Lifecycle
NOT_STARTED = "not_started"
RUNNING = "running"
OVER = "over"

# Cell classifications
EMPTY = "empty"
BODY = "body"
HEAD = "head"
FOOD = "food"


@dataclass(frozen=True)
class GameState:
    """A snapshot of the game. Transitions return a new instance.

    ``direction`` is the vector applied on the last tick, ``pending_direction``
    the one the next tick will apply. Reversal is checked against the former
    so two quick presses cannot turn the snake back into its neck.
    """

    snake: tuple
    food: tuple
    direction: tuple
    pending_direction: tuple
    score: int
    lifecycle: str
    game_over_reason: str = None

    @property
    def head(self):
        return self.snake[0]

    @property
    def started(self):
        return self.lifecycle != NOT_STARTED

    @property
    def game_over(self):
        return self.lifecycle == OVER


def initial_state():
    """Return a fresh game waiting for the start key."""
    return GameState(
        snake=INITIAL_SNAKE,
        food=INITIAL_FOOD,
        direction=INITIAL_DIRECTION,
        pending_direction=INITIAL_DIRECTION,
        score=0,
        lifecycle=NOT_STARTED,
    )


def in_bounds(pos, grid_size=GRID_SIZE):
    x, y = pos
    return 0 <= x < grid_size and 0 <= y < grid_size


def free_cells(snake, grid_size=GRID_SIZE):
    """List every cell not covered by the snake, row by row."""
    occupied = set(snake)
    return [
        (x, y)
        for y in range(grid_size)
        for x in range(grid_size)
        if (x, y) not in occupied
    ]


def random_food_position(snake, rng=random, max_attempts=FOOD_SAMPLE_ATTEMPTS, grid_size=GRID_SIZE):
    """Return a random grid position that is not occupied by the snake.

    Samples the whole board up to ``max_attempts`` times, then picks
    uniformly from the remaining free cells. Returns None when the snake
    covers the board.
    """
    occupied = set(snake)
    for _ in range(max_attempts):
        pos = (rng.randrange(grid_size), rng.randrange(grid_size))
        if pos not in occupied:
            return pos

    cells = free_cells(snake, grid_size)
    if not cells:
        return None
    logger.debug("Food sampling fell back to free-cell pick (%d free)", len(cells))
    return rng.choice(cells)


def is_reversal(current, requested):
    """True when ``requested`` points exactly opposite to ``current``."""
    return requested == (-current[0], -current[1])


def direction_for_key(key):
    return KEY_TO_DIRECTION.get(key)


def start_game(state):
    if state.lifecycle != NOT_STARTED:
        return state
    logger.info("Game started")
    return replace(state, lifecycle=RUNNING)


def change_direction(state, requested):
    """Queue ``requested`` for the next tick unless it would reverse the snake."""
    if requested not in DIRECTIONS:
        raise ValueError(f"Not a direction vector: {requested!r}")
    if state.lifecycle != RUNNING:
        return state
    if is_reversal(state.direction, requested):
        return state
    return replace(state, pending_direction=requested)


def handle_key(state, key):
    """Apply one key press. Unrecognized keys leave the state unchanged."""
    if state.lifecycle == NOT_STARTED:
        if key == START_KEY:
            return start_game(state)
        return state
    if state.lifecycle != RUNNING:
        return state

    requested = direction_for_key(key)
    if requested is None:
        return state
    return change_direction(state, requested)


def _end_game(state, reason):
    logger.info("Game over (%s), score %d, length %d", reason, state.score, len(state.snake))
    return replace(
        state,
        lifecycle=OVER,
        game_over_reason=reason,
    )


def step(state, rng=random):
    """Advance the snake one cell and resolve collisions and food."""
    if state.lifecycle != RUNNING:
        return state

    direction = state.pending_direction
    head_x, head_y = state.head
    dx, dy = direction
    new_head = (head_x + dx, head_y + dy)

    if not in_bounds(new_head):
        return _end_game(state, "wall")

    # The tail still counts here even though it would move away this tick.
    if new_head in state.snake:
        return _end_game(state, "self")

    if new_head == state.food:
        snake = (new_head,) + state.snake
        score = state.score + SCORE_PER_FOOD
        food = random_food_position(snake, rng)
        grown = replace(
            state,
            snake=snake,
            food=food,
            direction=direction,
            score=score,
        )
        if food is None:
            return _end_game(grown, "board_full")
        return grown

    return replace(
        state,
        snake=(new_head,) + state.snake[:-1],
        direction=direction,
    )


def reset_game(state):
    """Return to the initial state once the game is over."""
    if state.lifecycle != OVER:
        return state
    logger.info("Game reset")
    return initial_state()


def classify_cells(snake, food, grid_size=GRID_SIZE):
    """Map the board to rows of cell kinds, indexed ``cells[y][x]``.

    Precedence is food, then head, then body, then empty.
    """
    body = set(snake)
    head = snake[0] if snake else None
    cells = []
    for y in range(grid_size):
        row = []
        for x in range(grid_size):
            pos = (x, y)
            if pos == food:
                row.append(FOOD)
            elif pos == head:
                row.append(HEAD)
            elif pos in body:
                row.append(BODY)
            else:
                row.append(EMPTY)
        cells.append(row)
    return cells


GAME_OVER_REASONS = {
    "wall": "You hit the wall.",
    "self": "You ran into yourself.",
    "board_full": "The board is full. You win!",
}


def status_lines(state):
    """Text shown under the board for the current lifecycle."""
    if state.lifecycle == NOT_STARTED:
        lines = ["Press Space to start!", "Use the arrow keys to steer"]
    elif state.lifecycle == RUNNING:
        lines = ["Arrows: move  |  Eat the red dots!"]
    else:
        lines = [
            "Game Over!",
            GAME_OVER_REASONS.get(state.game_over_reason, ""),
            f"Final score: {state.score}",
            "Press R or click Restart to play again",
        ]
    lines.append("Goal: eat red food to raise your score")
    lines.append("Avoid the walls and your own body")
    return [line for line in lines if line]
