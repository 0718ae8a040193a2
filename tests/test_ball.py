import pytest

from sandtable.physics.ball import Ball
from sandtable.physics.vector2 import Vector2


def test_starts_at_origin_not_at_target():
    ball = Ball(radius=5)
    assert ball.position == Vector2(0.0, 0.0)
    assert ball.speed == 1.0
    assert ball.at_target is False


def test_set_target_within_epsilon_is_already_arrived():
    ball = Ball(radius=1)
    ball.set_target(0.3, 0.0)  # 0.09 < 0.1
    assert ball.at_target is True

    ball.set_target(0.4, 0.0)  # 0.16 >= 0.1
    assert ball.at_target is False


def test_straight_line_unit_steps():
    # (0,0) -> (10,0), speed 1, dt 1: ten whole steps land exactly on the target,
    # but at 1.0 squared distance the tenth step is a move, not a snap.
    ball = Ball(radius=1)
    ball.set_target(10.0, 0.0)

    for k in range(1, 11):
        ball.advance(1.0)
        assert ball.position == Vector2(float(k), 0.0)

    assert ball.position == ball.target
    assert ball.at_target is False

    ball.advance(1.0)
    assert ball.at_target is True
    assert ball.position == Vector2(10.0, 0.0)


def test_snap_compares_squared_distance_to_linear_step():
    # distance 0.4 -> squared 0.16 < speed*dt = 0.2, so the ball snaps even though
    # a step of 0.2 would not reach. Comparing against (speed*dt)^2 = 0.04 would move.
    ball = Ball(radius=1)
    ball.set_target(0.4, 0.0)
    ball.advance(0.2)
    assert ball.at_target is True
    assert ball.position == Vector2(0.4, 0.0)


def test_step_when_squared_distance_equals_step_moves():
    ball = Ball(radius=1, position=Vector2(0.0, 0.0))
    ball.set_target(0.0, 1.0)
    ball.advance(1.0)  # 1.0 is not < 1.0
    assert ball.at_target is False
    assert ball.position == Vector2(0.0, 1.0)


def test_zero_length_direction_snaps():
    ball = Ball(radius=1, position=Vector2(2.0, 3.0))
    ball.set_target(2.0, 3.0)
    # even with dt=0 the zero vector is never normalized
    ball.advance(0.0)
    assert ball.at_target is True
    assert ball.position == Vector2(2.0, 3.0)


def test_arrival_is_monotonic():
    ball = Ball(radius=2, position=Vector2(5.0, 5.0))
    ball.set_target(37.3, -12.9)

    prev = (ball.target - ball.position).length_squared()
    for _ in range(10_000):
        if ball.at_target:
            break
        ball.advance(0.2)
        d = (ball.target - ball.position).length_squared()
        assert d < prev
        prev = d

    assert ball.at_target is True
    assert ball.position == ball.target


def test_rejects_bad_construction():
    with pytest.raises(ValueError):
        Ball(radius=-1)
    with pytest.raises(ValueError):
        Ball(radius=1, speed=0)
