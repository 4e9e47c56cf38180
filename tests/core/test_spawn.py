"""core.spawn のスポーンパターンをテスト。"""

from __future__ import annotations

import math

import numpy as np
import pytest

from lightflow.core.bounds import Rect
from lightflow.core.errors import FieldConfigError
from lightflow.core.random import Lcg, make_rng
from lightflow.core.spawn import SpawnPattern, check_spawn_options, spawn_points
from lightflow.core.spawn_registry import spawn_registry

_REGION = Rect(100.0, 100.0, 900.0, 900.0)


def _options(pattern: str, count: int) -> dict:
    if pattern == "radial-burst":
        return {"rings": min(12, count)}
    return {}


@pytest.mark.parametrize("pattern", [p.value for p in SpawnPattern])
@pytest.mark.parametrize("count", [1, 2, 3, 7, 12, 13, 50, 600])
def test_spawn_count_is_exact(pattern: str, count: int) -> None:
    out = spawn_points(pattern, count, _REGION, make_rng(1), **_options(pattern, count))
    assert len(out) == count
    assert out.points.shape == (count, 2)
    assert out.rings.shape == (count,)


@pytest.mark.parametrize("pattern", [p.value for p in SpawnPattern])
def test_spawn_is_deterministic_for_same_seed(pattern: str) -> None:
    a = spawn_points(pattern, 100, _REGION, make_rng("seed"), **_options(pattern, 100))
    b = spawn_points(pattern, 100, _REGION, make_rng("seed"), **_options(pattern, 100))
    assert np.array_equal(a.points, b.points)
    assert np.array_equal(a.rings, b.rings)


def test_grid_four_points_are_corners_in_row_major_order() -> None:
    out = spawn_points("grid", 4, Rect(0.0, 0.0, 10.0, 10.0), make_rng(0))
    assert out.points.tolist() == [[0.0, 0.0], [10.0, 0.0], [0.0, 10.0], [10.0, 10.0]]


def test_grid_single_point_is_region_center() -> None:
    out = spawn_points("grid", 1, Rect(0.0, 0.0, 10.0, 10.0), make_rng(0))
    assert out.points.tolist() == [[5.0, 5.0]]


def test_grid_single_row_is_vertically_centered() -> None:
    out = spawn_points("grid", 2, Rect(0.0, 0.0, 10.0, 10.0), make_rng(0))
    assert out.points.tolist() == [[0.0, 5.0], [10.0, 5.0]]


def test_grid_partial_last_row() -> None:
    out = spawn_points(SpawnPattern.GRID, 5, Rect(0.0, 0.0, 10.0, 10.0), make_rng(0))
    assert out.points.tolist() == [[0.0, 0.0], [5.0, 0.0], [10.0, 0.0], [0.0, 10.0], [5.0, 10.0]]


def test_random_points_lie_inside_region() -> None:
    out = spawn_points("random", 500, _REGION, make_rng(3))
    assert np.all(out.points[:, 0] >= _REGION.x0) and np.all(out.points[:, 0] <= _REGION.x1)
    assert np.all(out.points[:, 1] >= _REGION.y0) and np.all(out.points[:, 1] <= _REGION.y1)
    assert np.all(out.rings == 0)


def test_random_consumes_x_then_y_per_point() -> None:
    rng = Lcg(42)
    out = spawn_points("random", 2, _REGION, rng)
    ref = Lcg(42)
    expected = []
    for _ in range(2):
        x = 100.0 + ref.random() * 800.0
        y = 100.0 + ref.random() * 800.0
        expected.append([x, y])
    assert out.points.tolist() == expected


def test_center_points_within_half_min_dimension() -> None:
    region = Rect(0.0, 0.0, 400.0, 200.0)
    out = spawn_points("center", 300, region, make_rng(9))
    d = np.hypot(out.points[:, 0] - 200.0, out.points[:, 1] - 100.0)
    assert np.all(d <= 100.0 + 1e-9)


def test_ring_without_jitter_lies_on_circle_at_even_angles() -> None:
    out = spawn_points("ring", 8, _REGION, make_rng(0), radius=100.0, jitter=0.0)
    d = np.hypot(out.points[:, 0] - 500.0, out.points[:, 1] - 500.0)
    assert np.allclose(d, 100.0)
    angles = np.arctan2(out.points[:, 1] - 500.0, out.points[:, 0] - 500.0)
    expected = np.arctan2(np.sin(np.arange(8) * math.pi / 4.0), np.cos(np.arange(8) * math.pi / 4.0))
    assert np.allclose(angles, expected)


def test_ring_default_radius_and_circle_alias() -> None:
    a = spawn_points("ring", 10, _REGION, make_rng(4))
    b = spawn_points("circle", 10, _REGION, make_rng(4))
    assert np.array_equal(a.points, b.points)
    d = np.hypot(a.points[:, 0] - 500.0, a.points[:, 1] - 500.0)
    assert abs(float(np.mean(d)) - 320.0) < 20.0


def test_ring_accepts_lcg_random_source() -> None:
    a = spawn_points("ring", 5, _REGION, Lcg(54321), radius=150.0, jitter=15.0, start_angle=-1.0)
    b = spawn_points("ring", 5, _REGION, Lcg(54321), radius=150.0, jitter=15.0, start_angle=-1.0)
    assert np.array_equal(a.points, b.points)


def test_radial_burst_ring_indices_and_radii() -> None:
    count = 600
    out = spawn_points("radial-burst", count, _REGION, make_rng("lightfast"))
    rings = out.rings
    assert rings.min() == 0
    assert rings.max() <= 11
    # リング部分は ring index の昇順に並ぶ。
    assert np.all(np.diff(rings) >= 0)

    max_radius = 400.0
    d = np.hypot(out.points[:, 0] - 500.0, out.points[:, 1] - 500.0)
    for k in range(int(rings.max()) + 1):
        ring_radius = max_radius * ((k + 1) / 12) ** 0.7
        mean = float(np.mean(d[rings == k]))
        assert abs(mean - ring_radius) < ring_radius * 0.1


def test_radial_burst_tops_up_with_center_points() -> None:
    out = spawn_points(
        "radial-burst",
        13,
        _REGION,
        make_rng(2),
        rings=12,
        ring_growth=0.0,
        center_fraction=0.0,
    )
    # 12 リング x 1 点で 1 点足りない分は中心付近の点で補う。
    assert len(out) == 13
    assert out.rings.tolist() == list(range(12)) + [0]
    last = out.points[-1]
    assert math.hypot(last[0] - 500.0, last[1] - 500.0) <= 400.0 * 0.3 + 1e-9


def test_radial_burst_truncates_center_batch_when_rings_fill_count() -> None:
    out = spawn_points(
        "radial-burst", 30, _REGION, make_rng(5), rings=2, ring_growth=0.0, center_fraction=0.5
    )
    # 2 リング x 15 点でちょうど 30 点に達するので center 点は切り詰められる。
    assert out.rings.tolist() == [0] * 15 + [1] * 15


def test_radial_burst_rejects_more_rings_than_points() -> None:
    with pytest.raises(FieldConfigError):
        spawn_points("radial-burst", 5, _REGION, make_rng(0), rings=12)


def test_spawn_zero_count_is_empty_and_negative_is_error() -> None:
    out = spawn_points("random", 0, _REGION, make_rng(0))
    assert len(out) == 0
    assert out.points.shape == (0, 2)
    with pytest.raises(FieldConfigError):
        spawn_points("random", -1, _REGION, make_rng(0))


def test_spawn_rejects_unknown_pattern_and_option() -> None:
    with pytest.raises(FieldConfigError):
        spawn_points("spiral", 3, _REGION, make_rng(0))
    with pytest.raises(FieldConfigError):
        spawn_points("grid", 3, _REGION, make_rng(0), rings=3)
    with pytest.raises(FieldConfigError):
        spawn_points("ring", 3, _REGION, make_rng(0), jitter=-1.0)


def test_spawn_registry_lists_builtin_patterns() -> None:
    assert set(spawn_registry.names()) == {p.value for p in SpawnPattern}
    assert "circle" in spawn_registry
    assert spawn_registry.resolve(SpawnPattern.RING) == "ring"


def test_spawn_set_arrays_are_readonly() -> None:
    out = spawn_points("center", 3, _REGION, make_rng(0))
    assert not out.points.flags.writeable
    assert not out.rings.flags.writeable


def test_ring_radius_scale_draws_one_uniform_per_point() -> None:
    out = spawn_points(
        "ring",
        5,
        _REGION,
        Lcg(54321),
        radius=150.0,
        radius_scale=(0.8, 1.2),
        jitter=0.0,
        start_angle=-0.6 * math.pi,
    )
    ref = Lcg(54321)
    expected = [150.0 * (0.8 + ref.random() * 0.4) for _ in range(5)]
    d = np.hypot(out.points[:, 0] - 500.0, out.points[:, 1] - 500.0)
    assert np.allclose(d, expected)


def test_check_spawn_options_validates_before_generation() -> None:
    assert check_spawn_options("circle", 5, {"radius": 10.0}) == "ring"
    assert check_spawn_options("radial-burst", 0, {}) == "radial-burst"
    with pytest.raises(FieldConfigError):
        check_spawn_options("radial-burst", 5, {})
    with pytest.raises(FieldConfigError):
        check_spawn_options("grid", 4, {"bogus": 1})
    with pytest.raises(FieldConfigError):
        check_spawn_options("radial-burst", 50, {"radius_exponent": 0.0})
