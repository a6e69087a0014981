# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import math
import random

import pytest

from guidesphere.journey.models import Position
from guidesphere.journey.projection import great_circle, place_position, project

CENTER = (200.0, 150.0)


def test_front_point_projects_to_center_x():
    p = project(Position(lat=0.0, lng=0.0), 0.0, 100.0, CENTER)
    assert p.x == pytest.approx(CENTER[0])
    assert p.y == pytest.approx(CENTER[1])
    assert p.visibility == pytest.approx(1.0)
    assert p.scale == pytest.approx(1.0)
    assert not p.culled


def test_latitude_moves_point_up():
    p = project(Position(lat=30.0, lng=0.0), 0.0, 100.0, CENTER)
    assert p.y == pytest.approx(CENTER[1] - 50.0)


def test_limb_and_back_side():
    limb = project(Position(lat=0.0, lng=90.0), 0.0, 100.0, CENTER)
    assert limb.x == pytest.approx(CENTER[0] + 100.0)
    assert limb.visibility == pytest.approx(0.0, abs=1e-9)
    assert limb.scale == pytest.approx(0.5)

    back = project(Position(lat=0.0, lng=180.0), 0.0, 100.0, CENTER)
    assert back.visibility == pytest.approx(-1.0)
    assert back.culled


def test_rotation_brings_step_to_front():
    pos = Position(lat=10.0, lng=60.0)
    p = project(pos, -math.radians(60.0), 100.0, CENTER)
    assert p.x == pytest.approx(CENTER[0])
    assert p.visibility == pytest.approx(1.0)


def test_place_single_step():
    pos = place_position(0, 1, random.Random(0))
    assert 30.0 <= pos.lat <= 40.0
    assert -125.0 <= pos.lng <= -115.0


class _EdgeRng:
    def uniform(self, a: float, b: float) -> float:
        return b


def test_place_applies_jitter_on_both_axes():
    pos = place_position(2, 3, _EdgeRng())
    assert pos.lat == pytest.approx(-30.0)
    assert pos.lng == pytest.approx(125.0)


def test_great_circle_endpoints_and_midpoint():
    a, b = Position(0.0, 0.0), Position(0.0, 90.0)
    pts = great_circle(a, b, segments=4)
    assert len(pts) == 5
    assert pts[0].lat == pytest.approx(0.0, abs=1e-9)
    assert pts[0].lng == pytest.approx(0.0, abs=1e-9)
    assert pts[-1].lng == pytest.approx(90.0)
    assert pts[2].lng == pytest.approx(45.0)
    assert pts[2].lat == pytest.approx(0.0, abs=1e-9)


def test_great_circle_coincident_points():
    a = Position(12.0, 34.0)
    pts = great_circle(a, a, segments=3)
    assert pts == [a, a, a, a]
