import os
import random

# Headless pygame for the renderer tests; must be set before pygame is imported
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pytest

from game_config import GameConfig
from game_session import Session


@pytest.fixture
def config():
    return GameConfig()


@pytest.fixture
def session(config):
    s = Session(config, random.Random(1234))
    s.initialize(800, 600)
    return s
