import logging
import random
from typing import List, Optional, Tuple

import pygame

from bird import Bird
from game_config import GameConfig, require_positive

logger = logging.getLogger(__name__)

# (x, y, width, height) in world units
Box = Tuple[float, float, float, float]


class PipePair:
    """
    One top/bottom obstacle pair sharing a horizontal position and a gap.
    Geometry is derived from `left` and `gap_center_y` on demand.
    """
    def __init__(self, config: GameConfig, left: float = 0.0, gap_center_y: float = 0.0):
        self.config = config
        self.left = float(left)
        self.gap_center_y = float(gap_center_y)
        self.scored = False

    @property
    def right(self) -> float:
        return self.left + self.config.pipe_width

    @property
    def gap_top(self) -> float:
        return self.gap_center_y - self.config.pipe_gap / 2

    @property
    def gap_bottom(self) -> float:
        return self.gap_center_y + self.config.pipe_gap / 2

    def top_pipe(self) -> Box:
        c = self.config
        return (self.left, self.gap_top - c.pipe_height, c.pipe_width, c.pipe_height)

    def bottom_pipe(self) -> Box:
        c = self.config
        return (self.left, self.gap_bottom, c.pipe_width, c.pipe_height)

    def top_cap(self) -> Box:
        c = self.config
        return (self.left - c.cap_overhang, self.gap_top - c.cap_overlap, c.cap_width, c.cap_height)

    def bottom_cap(self) -> Box:
        c = self.config
        return (self.left - c.cap_overhang, self.gap_bottom - c.cap_overlap, c.cap_width, c.cap_height)

    def boxes(self) -> List[Box]:
        return [self.top_pipe(), self.bottom_pipe(), self.top_cap(), self.bottom_cap()]

    def rects(self) -> List[pygame.Rect]:
        """Collidable rectangles, truncated to whole units like the bird's hitbox."""
        return [pygame.Rect(int(x), int(y), int(w), int(h)) for x, y, w, h in self.boxes()]

    def collides_with(self, bird: Bird) -> bool:
        return bird.bounds().collidelist(self.rects()) != -1

    def is_off_screen(self) -> bool:
        return self.right < 0

    def __repr__(self):
        return f"PipePair(left={self.left:.1f}, gap_center_y={self.gap_center_y:.1f}, scored={self.scored})"


class PipeField:
    """
    Component: The Pipe Field
    Mechanism: Fixed slots recycled in place

    A constant number of PipePairs is created once per initialize().
    A pair that scrolls off the left edge is moved behind the rightmost
    pair instead of being destroyed, so consecutive pairs always sit
    exactly `pipe_spacing` apart.
    """
    def __init__(self, config: GameConfig, rng: Optional[random.Random] = None):
        self.config = config
        self.rng = rng if rng is not None else random.Random()
        self.pairs: List[PipePair] = []
        self.screen_width = 0
        self.screen_height = 0

    def initialize(self, screen_width: int, screen_height: int):
        require_positive(
            screen_width=screen_width,
            screen_height=screen_height,
            pipe_pairs=self.config.pipe_pairs,
        )
        self.screen_width = screen_width
        self.screen_height = screen_height

        self.pairs = []
        for i in range(self.config.pipe_pairs):
            left = screen_width + i * self.config.pipe_spacing
            self.pairs.append(PipePair(self.config, left, self._random_gap_center()))

    def _random_gap_center(self) -> float:
        center = self.screen_height / 2
        return self.rng.uniform(center - self.config.max_offset, center + self.config.max_offset)

    def advance(self, speed: float):
        for pair in self.pairs:
            pair.left -= speed

    def off_screen(self) -> List[PipePair]:
        """Pairs whose right edge has crossed the left screen border, leftmost first."""
        return sorted((p for p in self.pairs if p.is_off_screen()), key=lambda p: p.left)

    def recycle(self, pair: PipePair):
        """Respawn `pair` one spacing behind the rightmost pair with a fresh gap."""
        rightmost = max(p.left for p in self.pairs)
        pair.left = rightmost + self.config.pipe_spacing
        pair.gap_center_y = self._random_gap_center()
        pair.scored = False
        logger.debug("Recycled pipe pair to left=%.1f gap_center_y=%.1f", pair.left, pair.gap_center_y)

    def recycle_off_screen(self) -> int:
        recycled = self.off_screen()
        for pair in recycled:
            self.recycle(pair)
        return len(recycled)

    def check_collision(self, bird: Bird) -> bool:
        return any(pair.collides_with(bird) for pair in self.pairs)

    def check_score(self, bird: Bird) -> int:
        """
        Mark every unscored pair the bird has fully passed.
        Returns the number of score events; the `scored` flag makes each
        pair count at most once until it is recycled.
        """
        events = 0
        for pair in self.pairs:
            if not pair.scored and bird.x > pair.right:
                pair.scored = True
                events += 1
        return events

    def ordered(self) -> List[PipePair]:
        return sorted(self.pairs, key=lambda p: p.left)


if __name__ == "__main__":
    # Quick stub: scroll a seeded field and show the slots being reused
    field = PipeField(GameConfig(), random.Random(7))
    field.initialize(800, 600)
    for _ in range(200):
        field.advance(7.0)
        field.recycle_off_screen()
    for p in field.ordered():
        print(p)
