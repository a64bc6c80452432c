"""
Tests for ballast bubbles and the sea surface.

Tests cover:
- Bubble spawn conditions and cadence
- Rise, fade, expiry and surface popping
- Seeded reproducibility
- Wave height bounds
"""

import numpy as np
import pytest

from subsim.ballast import BallastState
from subsim.environment import (
    BUBBLE_MAX_ALPHA,
    BUBBLE_RISE_SPEED,
    WAVE_HEIGHT,
    Bubble,
    BubbleEmitter,
    WaveClock,
    wave_height,
)
from subsim.physics import Vector3D


@pytest.fixture
def venting():
    return BallastState(vents_open=True, fill_level=0.5)


@pytest.fixture
def submerged():
    return Vector3D(0.0, -5.0, 0.0)


class TestBubble:
    """Tests for a single Bubble."""

    def test_alpha_fades(self):
        bubble = Bubble(position=Vector3D(0, -5, 0), radius=0.1, lifetime=1.0)
        assert bubble.alpha == pytest.approx(BUBBLE_MAX_ALPHA)
        bubble.age = 0.5
        assert bubble.alpha == pytest.approx(BUBBLE_MAX_ALPHA / 2)
        bubble.age = 1.0
        assert bubble.alpha == 0.0
        assert bubble.expired


class TestBubbleEmitter:
    """Tests for BubbleEmitter."""

    def test_spawns_while_venting(self, venting, submerged):
        emitter = BubbleEmitter.seeded(1)
        spawned = emitter.update(venting, submerged, 0.1)
        assert spawned == 1
        assert len(emitter.bubbles) == 1
        assert emitter.spawn_timer == pytest.approx(0.02)

    def test_spawn_cadence(self, venting, submerged):
        emitter = BubbleEmitter.seeded(1)
        assert emitter.update(venting, submerged, 0.5) == 6

    @pytest.mark.parametrize("ballast,position", [
        (BallastState(vents_open=False, fill_level=0.5), Vector3D(0, -5, 0)),
        (BallastState(vents_open=True, fill_level=1.0), Vector3D(0, -5, 0)),
        (BallastState(vents_open=True, fill_level=0.5), Vector3D(0, 0, 0)),
        (BallastState(vents_open=True, fill_level=0.5), None),
    ])
    def test_no_spawn_conditions(self, ballast, position):
        emitter = BubbleEmitter.seeded(1)
        emitter.spawn_timer = 0.05
        assert emitter.update(ballast, position, 0.5) == 0
        assert emitter.bubbles == []
        assert emitter.spawn_timer == 0.0

    def test_spawned_bubble_properties(self, venting, submerged):
        emitter = BubbleEmitter.seeded(3)
        emitter.update(venting, submerged, 0.5)
        assert emitter.bubbles
        for bubble in emitter.bubbles:
            assert 0.08 <= bubble.radius <= 0.14
            assert 1.0 <= bubble.lifetime <= 1.5
            assert abs(bubble.position.x) <= 0.25
            assert abs(bubble.position.z) <= 0.25

    def test_bubbles_rise(self, venting, submerged):
        emitter = BubbleEmitter.seeded(1)
        emitter.update(venting, submerged, 0.1)
        y = emitter.bubbles[0].position.y
        emitter.update(BallastState(), submerged, 0.1)
        assert emitter.bubbles[0].position.y == pytest.approx(y + BUBBLE_RISE_SPEED * 0.1)

    def test_bubble_pops_at_surface(self):
        emitter = BubbleEmitter.seeded(1)
        emitter.bubbles.append(Bubble(position=Vector3D(0, -0.1, 0), radius=0.1, lifetime=1.0))
        emitter.update(BallastState(), None, 0.1)
        assert emitter.bubbles == []

    def test_configured_surface(self, venting):
        emitter = BubbleEmitter.seeded(1, surface_y=-2.0)
        assert emitter.update(venting, Vector3D(0, -1.0, 0), 0.1) == 0
        assert emitter.update(venting, Vector3D(0, -5.0, 0), 0.1) == 1

        emitter.bubbles = [Bubble(position=Vector3D(0, -2.1, 0), radius=0.1, lifetime=1.0)]
        emitter.update(BallastState(), None, 0.1)
        assert emitter.bubbles == []

    def test_bubble_expires(self):
        emitter = BubbleEmitter.seeded(1)
        emitter.bubbles.append(
            Bubble(position=Vector3D(0, -100, 0), radius=0.1, lifetime=1.0, age=0.95)
        )
        emitter.update(BallastState(), None, 0.1)
        assert emitter.bubbles == []

    def test_seeded_reproducible(self, venting, submerged):
        a = BubbleEmitter.seeded(42)
        b = BubbleEmitter.seeded(42)
        a.update(venting, submerged, 0.5)
        b.update(venting, submerged, 0.5)
        assert [x.position for x in a.bubbles] == [x.position for x in b.bubbles]
        assert [x.radius for x in a.bubbles] == [x.radius for x in b.bubbles]

    def test_bubble_copy_is_independent(self):
        bubble = Bubble(position=Vector3D(0, -3, 0), radius=0.1, lifetime=1.0, age=0.2)
        clone = bubble.copy()
        bubble.age = 0.9
        bubble.position = Vector3D(0, -1, 0)
        assert clone.age == 0.2
        assert clone.position == Vector3D(0, -3, 0)


class TestWaves:
    """Tests for the sea surface."""

    def test_flat_at_origin_at_start(self):
        assert wave_height(0.0, 0.0, 0.0) == 0.0

    def test_height_bounded(self):
        xs = np.linspace(-20.0, 20.0, 41)
        for t in (0.0, 1.3, 7.9):
            for x in xs:
                for z in xs:
                    assert abs(wave_height(float(x), float(z), t)) <= WAVE_HEIGHT + 1e-12

    def test_surface_moves_over_time(self):
        assert wave_height(1.0, 2.0, 0.0) != pytest.approx(wave_height(1.0, 2.0, 0.5))

    def test_wave_clock(self):
        clock = WaveClock()
        clock.advance(0.5)
        clock.advance(-1.0)
        assert clock.elapsed == 0.5
        assert clock.height_at(1.0, 2.0) == wave_height(1.0, 2.0, 0.5)
