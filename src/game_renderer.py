import logging
import math
import time
from typing import Optional

import pygame

from game_config import GameConfig
from game_session import GameState, RectView, RenderState, Session

logger = logging.getLogger(__name__)

SKY_BLUE = (135, 206, 235)
BIRD_YELLOW = (255, 220, 0)
BIRD_OUTLINE = (120, 80, 0)
PIPE_GREEN = (60, 180, 60)
CAP_GREEN = (30, 130, 30)
WHITE = (255, 255, 255)
GOLD = (255, 215, 0)
CRIMSON = (220, 20, 60)

# Upper bound on catch-up ticks after a stall (window drag, breakpoint...)
MAX_TICKS_PER_FRAME = 5


def to_rect(view: RectView) -> pygame.Rect:
    return pygame.Rect(int(view.x), int(view.y), int(view.width), int(view.height))


def score_text(state: RenderState) -> str:
    text = f"Score: {state.score}"
    if state.speed_multiplier > 1.0:
        text += f" (Speed: x{state.speed_multiplier:.1f})"
    return text


class GameRenderer:
    """
    Draws a RenderState onto a surface. Holds no simulation state; the
    pulse used for the restart prompt comes from the `now` argument only.
    """
    def __init__(self, surface: pygame.Surface):
        self.surface = surface
        if not pygame.font.get_init():
            pygame.font.init()
        self.score_font = pygame.font.SysFont("Arial", 28, bold=True)
        self.title_font = pygame.font.SysFont("Arial", 72, bold=True)
        self.prompt_font = pygame.font.SysFont("Arial", 28)
        self.high_score_font = pygame.font.SysFont("Arial", 24, bold=True)
        self._bird_sprite: Optional[pygame.Surface] = None

    def _bird_surface(self, size: int) -> pygame.Surface:
        if self._bird_sprite is None or self._bird_sprite.get_width() != size:
            sprite = pygame.Surface((size, size), pygame.SRCALPHA)
            pygame.draw.rect(sprite, BIRD_YELLOW, sprite.get_rect(), border_radius=size // 4)
            pygame.draw.rect(sprite, BIRD_OUTLINE, sprite.get_rect(), width=2, border_radius=size // 4)
            # Eye, so the rotation is visible
            pygame.draw.circle(sprite, BIRD_OUTLINE, (size * 3 // 4, size // 3), max(2, size // 10))
            self._bird_sprite = sprite
        return self._bird_sprite

    def draw(self, state: RenderState, now: Optional[float] = None):
        if now is None:
            now = time.monotonic()
        self.surface.fill(SKY_BLUE)

        # Pipes disappear once the round is lost
        if state.state == GameState.PLAYING:
            self._draw_pipes(state)
        self._draw_bird(state)
        self._draw_score(state)

        if state.state == GameState.GAME_OVER:
            self._draw_game_over(state, now)

    def _draw_pipes(self, state: RenderState):
        for pair in state.pipes:
            pygame.draw.rect(self.surface, PIPE_GREEN, to_rect(pair.top))
            pygame.draw.rect(self.surface, PIPE_GREEN, to_rect(pair.bottom))
            pygame.draw.rect(self.surface, CAP_GREEN, to_rect(pair.top_cap))
            pygame.draw.rect(self.surface, CAP_GREEN, to_rect(pair.bottom_cap))

    def _draw_bird(self, state: RenderState):
        bird = state.bird
        # Nose down while falling; pygame rotates counter-clockwise
        angle = -bird.velocity * 5
        sprite = pygame.transform.rotate(self._bird_surface(bird.size), angle)
        center = (bird.x + bird.size / 2, bird.y + bird.size / 2)
        self.surface.blit(sprite, sprite.get_rect(center=center))

    def _draw_score(self, state: RenderState):
        text = self.score_font.render(score_text(state), True, WHITE)
        self.surface.blit(text, (10, 10))

    def _draw_centered(self, font: pygame.font.Font, text: str, color, center_y: int, alpha: int = 255):
        rendered = font.render(text, True, color)
        if alpha < 255:
            rendered.set_alpha(alpha)
        self.surface.blit(rendered, rendered.get_rect(center=(self.surface.get_width() // 2, center_y)))

    def _draw_game_over(self, state: RenderState, now: float):
        overlay = pygame.Surface(self.surface.get_size(), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 180))
        self.surface.blit(overlay, (0, 0))

        center_y = self.surface.get_height() // 2
        pulse = (math.sin(now * 3) + 1) / 2
        self._draw_centered(self.high_score_font, f"High Score: {state.best_score}", GOLD, center_y - 160)
        self._draw_centered(self.title_font, "GAME OVER", CRIMSON, center_y - 50)
        self._draw_centered(self.prompt_font, "Press R to Restart", WHITE, center_y + 60, alpha=int(200 + 55 * pulse))


class GameApp:
    """
    Component: The Host
    Mechanism: Fixed-step simulation inside a variable-rate render loop

    Ticks the session every `tick_interval_ms` of real time no matter how
    fast frames are drawn, and maps keys onto the session's inputs.
    """
    def __init__(self, session: Session, config: GameConfig):
        self.session = session
        self.config = config
        self.tick_seconds = config.tick_interval_ms / 1000.0
        self.running = False

    def handle_event(self, event: pygame.event.Event):
        if event.type == pygame.QUIT:
            self.running = False
        elif event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                self.running = False
            elif event.key == pygame.K_SPACE:
                self.session.handle_jump()
            elif event.key == pygame.K_r:
                self.session.handle_restart()

    def step(self, elapsed: float, accumulator: float) -> float:
        """Run as many whole ticks as `elapsed` affords; return the leftover time."""
        accumulator += elapsed
        ticks = 0
        while accumulator >= self.tick_seconds and ticks < MAX_TICKS_PER_FRAME:
            self.session.tick()
            accumulator -= self.tick_seconds
            ticks += 1
        if ticks == MAX_TICKS_PER_FRAME and accumulator >= self.tick_seconds:
            logger.debug("Dropping %.3fs of simulation after a stall", accumulator)
            accumulator = 0.0
        return accumulator

    def run(self):
        pygame.init()
        screen = pygame.display.set_mode((self.config.screen_width, self.config.screen_height))
        pygame.display.set_caption("Flappy Bird")
        clock = pygame.time.Clock()
        renderer = GameRenderer(screen)

        if not self.session.initialized:
            self.session.initialize(self.config.screen_width, self.config.screen_height)

        self.running = True
        accumulator = 0.0
        logger.info("Window opened at %dx%d", self.config.screen_width, self.config.screen_height)
        try:
            while self.running:
                elapsed = clock.tick(self.config.render_fps) / 1000.0
                for event in pygame.event.get():
                    self.handle_event(event)
                accumulator = self.step(elapsed, accumulator)
                renderer.draw(self.session.snapshot())
                pygame.display.flip()
        finally:
            pygame.quit()
