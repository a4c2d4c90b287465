import logging
import math
import random
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from bird import Bird
from game_config import GameConfig, require_positive
from pipe_field import Box, PipeField

logger = logging.getLogger(__name__)


class GameState(str, Enum):
    PLAYING = "playing"
    GAME_OVER = "game_over"


class SessionNotInitializedError(RuntimeError):
    """Raised when the session is driven before initialize() was called."""


def speed_multiplier_for(score: int, config: GameConfig) -> float:
    """Discrete difficulty step every `points_per_speed_step` points, capped."""
    steps = math.floor(score / config.points_per_speed_step)
    return min(1.0 + steps * config.speed_increase_per_5_points, config.max_speed_multiplier)


class RectView(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_box(cls, box: Box) -> "RectView":
        x, y, w, h = box
        return cls(x=x, y=y, width=w, height=h)


class BirdView(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    size: int
    velocity: float


class PipePairView(BaseModel):
    model_config = ConfigDict(frozen=True)

    top: RectView
    bottom: RectView
    top_cap: RectView
    bottom_cap: RectView
    scored: bool


class RenderState(BaseModel):
    """Read-only picture of a session handed to the host once per frame."""
    model_config = ConfigDict(frozen=True)

    state: GameState
    score: int
    best_score: int
    speed_multiplier: float
    bird: BirdView
    pipes: List[PipePairView]
    screen_width: int
    screen_height: int
    game_over_reason: Optional[str] = None


class Session:
    """
    Component: The Game Loop
    Mechanism: Two-state machine (PLAYING -> GAME_OVER -> new PLAYING life)

    Owns the Bird and the PipeField. The host calls tick() at a fixed
    cadence, forwards key presses to handle_jump()/handle_restart(), and
    reads snapshot() to draw.
    """
    def __init__(self, config: Optional[GameConfig] = None, rng: Optional[random.Random] = None):
        self.config = config if config is not None else GameConfig()
        self.rng = rng if rng is not None else random.Random()

        self.screen_width = 0
        self.screen_height = 0
        self.bird: Optional[Bird] = None
        self.pipe_field: Optional[PipeField] = None

        self.state: Optional[GameState] = None
        self.score = 0
        self.best_score = 0
        self.speed_multiplier = 1.0
        self.ticks = 0
        self.game_over_reason: Optional[str] = None

    @property
    def initialized(self) -> bool:
        return self.state is not None

    def _require_initialized(self):
        if not self.initialized:
            raise SessionNotInitializedError("Session.initialize() must be called first")

    def initialize(self, screen_width: int, screen_height: int):
        require_positive(
            screen_width=screen_width,
            screen_height=screen_height,
            pipe_pairs=self.config.pipe_pairs,
        )
        self.screen_width = screen_width
        self.screen_height = screen_height
        self._start_life()
        logger.info(
            "Session initialized at %dx%d with %d pipe pairs",
            screen_width, screen_height, self.config.pipe_pairs,
        )

    def _start_life(self):
        # Build the replacements first so no half-reset state is ever visible
        c = self.config
        bird = Bird(
            self.screen_width // 3,
            self.screen_height // 2,
            size=c.bird_size,
            gravity=c.gravity,
            jump_force=c.jump_force,
        )
        pipe_field = PipeField(c, self.rng)
        pipe_field.initialize(self.screen_width, self.screen_height)

        self.bird = bird
        self.pipe_field = pipe_field
        self.score = 0
        self.speed_multiplier = 1.0
        self.ticks = 0
        self.game_over_reason = None
        self.state = GameState.PLAYING

    @property
    def current_speed(self) -> float:
        return self.config.base_pipe_speed * self.speed_multiplier

    def tick(self):
        self._require_initialized()
        if self.state != GameState.PLAYING:
            return

        self.ticks += 1
        self.bird.update()

        multiplier = speed_multiplier_for(self.score, self.config)
        if multiplier != self.speed_multiplier:
            logger.debug("Speed multiplier %.1f -> %.1f at score %d", self.speed_multiplier, multiplier, self.score)
        self.speed_multiplier = multiplier

        self.pipe_field.advance(self.current_speed)
        self.pipe_field.recycle_off_screen()

        scored = self.pipe_field.check_score(self.bird)
        if scored:
            self.score += scored
            self.best_score = max(self.best_score, self.score)
            logger.debug("Scored %d, total %d", scored, self.score)

        reason = self._collision_reason()
        if reason is not None:
            self._game_over(reason)

    def _collision_reason(self) -> Optional[str]:
        if self.pipe_field.check_collision(self.bird):
            return "pipe"
        if self.bird.y < 0:
            return "ceiling"
        if self.bird.y > self.screen_height:
            return "floor"
        return None

    def _game_over(self, reason: str):
        self.state = GameState.GAME_OVER
        self.game_over_reason = reason
        logger.info("Game over (%s) after %d ticks with score %d", reason, self.ticks, self.score)

    def handle_jump(self) -> bool:
        self._require_initialized()
        if self.state != GameState.PLAYING:
            logger.debug("Jump ignored while %s", self.state.value)
            return False
        self.bird.jump()
        return True

    def handle_restart(self) -> bool:
        self._require_initialized()
        if self.state != GameState.GAME_OVER:
            logger.debug("Restart ignored while %s", self.state.value)
            return False
        self._start_life()
        logger.info("Session restarted (best score %d)", self.best_score)
        return True

    def snapshot(self) -> RenderState:
        self._require_initialized()
        pipes = [
            PipePairView(
                top=RectView.from_box(pair.top_pipe()),
                bottom=RectView.from_box(pair.bottom_pipe()),
                top_cap=RectView.from_box(pair.top_cap()),
                bottom_cap=RectView.from_box(pair.bottom_cap()),
                scored=pair.scored,
            )
            for pair in self.pipe_field.ordered()
        ]
        return RenderState(
            state=self.state,
            score=self.score,
            best_score=self.best_score,
            speed_multiplier=self.speed_multiplier,
            bird=BirdView(x=self.bird.x, y=self.bird.y, size=self.bird.size, velocity=self.bird.velocity),
            pipes=pipes,
            screen_width=self.screen_width,
            screen_height=self.screen_height,
            game_over_reason=self.game_over_reason,
        )
