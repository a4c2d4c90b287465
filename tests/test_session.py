import random

import pytest
from pydantic import ValidationError

from game_config import ConfigurationError, GameConfig
from game_session import GameState, Session, SessionNotInitializedError, speed_multiplier_for


def pipe_lefts(session):
    return [p.left for p in session.pipe_field.pairs]


def test_tick_before_initialize_fails():
    session = Session(GameConfig(), random.Random(0))
    with pytest.raises(SessionNotInitializedError):
        session.tick()
    with pytest.raises(SessionNotInitializedError):
        session.snapshot()


@pytest.mark.parametrize("width,height", [(0, 600), (800, 0), (-1, 600), (800, -600)])
def test_initialize_rejects_bad_dimensions(width, height):
    session = Session(GameConfig(), random.Random(0))
    with pytest.raises(ConfigurationError):
        session.initialize(width, height)
    assert not session.initialized


def test_initial_state(session):
    assert session.state == GameState.PLAYING
    assert session.score == 0
    assert session.speed_multiplier == 1.0
    assert (session.bird.x, session.bird.y) == (266.0, 300.0)
    assert session.bird.velocity == 0.0
    assert pipe_lefts(session) == [800.0, 1200.0]


def test_falling_bird_hits_the_floor(session):
    previous_y = session.bird.y
    for _ in range(100):
        was_playing = session.state == GameState.PLAYING
        session.tick()
        if was_playing:
            assert session.bird.y > previous_y
        previous_y = session.bird.y

    assert session.state == GameState.GAME_OVER
    assert session.game_over_reason == "floor"
    assert session.bird.y > 600
    assert session.ticks == 29
    assert session.score == 0


def test_flying_off_the_top_ends_the_game(session):
    session.bird.y = 5.0
    session.handle_jump()
    session.tick()
    assert session.state == GameState.GAME_OVER
    assert session.game_over_reason == "ceiling"


def test_pipe_collision_ends_the_game(session):
    pair = session.pipe_field.pairs[0]
    pair.left = session.bird.x
    pair.gap_center_y = 0.0
    session.tick()
    assert session.state == GameState.GAME_OVER
    assert session.game_over_reason == "pipe"


def test_game_over_is_terminal(session):
    while session.state == GameState.PLAYING:
        session.tick()
    before = session.snapshot()
    for _ in range(10):
        session.tick()
    assert session.snapshot() == before
    assert session.handle_jump() is False
    assert session.state == GameState.GAME_OVER


def test_restart_while_playing_is_ignored(session):
    for _ in range(5):
        session.tick()
    before = session.snapshot()
    assert session.handle_restart() is False
    assert session.snapshot() == before


def test_restart_after_game_over_starts_a_new_life(session):
    session.pipe_field.pairs[0].left = 200.0
    session.tick()
    assert session.score == 1
    while session.state == GameState.PLAYING:
        session.tick()

    old_field = session.pipe_field
    assert session.handle_restart() is True

    assert session.state == GameState.PLAYING
    assert session.score == 0
    assert session.best_score == 1
    assert session.speed_multiplier == 1.0
    assert session.ticks == 0
    assert session.game_over_reason is None
    assert (session.bird.x, session.bird.y, session.bird.velocity) == (266.0, 300.0, 0.0)
    assert session.pipe_field is not old_field
    assert pipe_lefts(session) == [800.0, 1200.0]


def test_jump_while_playing(session):
    session.tick()
    assert session.handle_jump() is True
    assert session.bird.velocity == -10.0
    session.tick()
    assert session.bird.velocity == pytest.approx(-9.3)


@pytest.mark.parametrize("score,expected", [
    (0, 1.0), (4, 1.0), (5, 1.5), (9, 1.5), (10, 2.0),
    (15, 2.5), (20, 3.0), (24, 3.0), (25, 3.0), (100, 3.0),
])
def test_speed_multiplier_steps(score, expected):
    assert speed_multiplier_for(score, GameConfig()) == expected


def test_speed_multiplier_respects_custom_cap():
    config = GameConfig(max_speed_multiplier=2.0, speed_increase_per_5_points=0.25)
    assert speed_multiplier_for(5, config) == 1.25
    assert speed_multiplier_for(1000, config) == 2.0


@pytest.mark.parametrize("score,multiplier,speed", [(5, 1.5, 10.5), (25, 3.0, 21.0), (100, 3.0, 21.0)])
def test_tick_uses_score_based_speed(session, score, multiplier, speed):
    session.score = score
    session.tick()
    assert session.speed_multiplier == multiplier
    assert pipe_lefts(session) == [800.0 - speed, 1200.0 - speed]


def test_passing_a_pair_scores_once(session):
    session.pipe_field.pairs[0].left = 200.0
    session.tick()
    assert session.score == 1
    session.tick()
    assert session.score == 1


def test_scored_pair_can_score_again_after_recycle(session):
    pair = session.pipe_field.pairs[0]
    pair.left = 200.0
    session.tick()
    assert pair.scored is True

    pair.left = -100.0
    session.tick()
    assert pair.scored is False
    assert pair.left == max(pipe_lefts(session))


def autopilot(session):
    """Flap when the bird sinks below the gap of the next pair."""
    bird = session.bird
    upcoming = [p for p in session.pipe_field.ordered() if p.right + 10 >= bird.x]
    target = upcoming[0].gap_center_y if upcoming else session.screen_height / 2
    if bird.y + bird.size / 2 > target + 15 and bird.velocity >= 0:
        session.handle_jump()


def test_long_run_invariants():
    session = Session(GameConfig(), random.Random(2024))
    session.initialize(800, 600)
    last_score = 0
    last_multiplier = 1.0
    spacing = session.config.pipe_spacing

    for _ in range(3000):
        autopilot(session)
        session.tick()

        assert session.score >= last_score
        assert session.score - last_score <= len(session.pipe_field.pairs)
        assert last_multiplier <= session.speed_multiplier <= 3.0
        lefts = [p.left for p in session.pipe_field.ordered()]
        assert all(b - a == pytest.approx(spacing) for a, b in zip(lefts, lefts[1:]))

        last_score = session.score
        last_multiplier = session.speed_multiplier
        if session.state == GameState.GAME_OVER:
            break


def test_same_seed_same_game():
    def play(seed):
        session = Session(GameConfig(), random.Random(seed))
        session.initialize(800, 600)
        frames = []
        for _ in range(200):
            autopilot(session)
            session.tick()
            frames.append(session.snapshot())
        return frames

    assert play(5) == play(5)


def test_snapshot_contents(session):
    snap = session.snapshot()
    assert snap.state == GameState.PLAYING
    assert snap.score == 0
    assert snap.speed_multiplier == 1.0
    assert (snap.bird.x, snap.bird.y, snap.bird.size, snap.bird.velocity) == (266.0, 300.0, 45, 0.0)
    assert [p.top.x for p in snap.pipes] == [800.0, 1200.0]
    assert snap.pipes[0].top_cap.width == 80
    assert (snap.screen_width, snap.screen_height) == (800, 600)

    with pytest.raises(ValidationError):
        snap.score = 10
