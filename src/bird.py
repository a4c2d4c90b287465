import pygame


class Bird:
    """
    Component: The Bird
    Mechanism: Explicit Euler integration, one step per tick.
    x never changes after creation; the world scrolls past the bird.
    """
    def __init__(self, x: float, y: float, size: int = 45, gravity: float = 0.7, jump_force: float = -10.0):
        self.x = float(x)
        self.y = float(y)
        self.velocity = 0.0
        self.size = size
        self.gravity = gravity
        self.jump_force = jump_force

    def update(self):
        # No clamping: leaving the screen is the session's concern
        self.velocity += self.gravity
        self.y += self.velocity

    def jump(self):
        # Replaces the current velocity rather than adding to it
        self.velocity = self.jump_force

    def bounds(self) -> pygame.Rect:
        """Square hitbox at the truncated position. Rotation never affects it."""
        return pygame.Rect(int(self.x), int(self.y), self.size, self.size)

    def __repr__(self):
        return f"Bird(x={self.x}, y={self.y:.2f}, velocity={self.velocity:.2f})"
