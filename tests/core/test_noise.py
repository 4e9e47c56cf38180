"""core.noise のノイズ原始関数をテスト。"""

from __future__ import annotations

import numpy as np
import pytest

from lightflow.core.errors import FieldConfigError
from lightflow.core.noise import GradientNoise, SineValueNoise, make_noise


def _grid_points() -> list[tuple[float, float, float]]:
    xs = np.linspace(-7.3, 11.9, 23)
    ys = np.linspace(-3.1, 5.7, 17)
    return [(float(x), float(y), 0.25) for x in xs for y in ys]


@pytest.mark.parametrize("kind", ["gradient", "sine"])
def test_noise_is_deterministic_for_same_seed(kind: str) -> None:
    a = make_noise(kind, 123)
    b = make_noise(kind, 123)
    for x, y, t in _grid_points():
        assert a.sample(x, y, t) == b.sample(x, y, t)


@pytest.mark.parametrize("kind", ["gradient", "sine"])
def test_noise_depends_on_seed(kind: str) -> None:
    a = make_noise(kind, 1)
    b = make_noise(kind, 2)
    diffs = [a.sample(x, y, t) != b.sample(x, y, t) for x, y, t in _grid_points()]
    assert any(diffs)


@pytest.mark.parametrize("kind", ["gradient", "sine"])
def test_noise_stays_in_unit_range(kind: str) -> None:
    noise = make_noise(kind, "range")
    values = np.array([noise.sample(x, y, t) for x, y, t in _grid_points()])
    assert np.all(values >= -1.0)
    assert np.all(values <= 1.0)
    assert np.ptp(values) > 0.0


@pytest.mark.parametrize("kind", ["gradient", "sine"])
def test_noise_is_continuous(kind: str) -> None:
    noise = make_noise(kind, 99)
    eps = 1e-5
    for x, y, t in _grid_points():
        base = noise.sample(x, y, t)
        assert abs(noise.sample(x + eps, y, t) - base) < 1e-3
        assert abs(noise.sample(x, y + eps, t) - base) < 1e-3


def test_gradient_noise_is_zero_on_lattice() -> None:
    noise = GradientNoise.from_seed(5)
    assert noise.sample(1.0, 2.0, 3.0) == 0.0
    assert noise.sample(-4.0, 0.0, 0.0) == 0.0


def test_gradient_noise_accepts_string_seed_and_keeps_table_readonly() -> None:
    noise = GradientNoise.from_seed("lightfast")
    assert noise.perm.shape == (512,)
    assert not noise.perm.flags.writeable
    assert np.array_equal(noise.perm[:256], noise.perm[256:])
    assert sorted(noise.perm[:256].tolist()) == list(range(256))


def test_gradient_noise_rejects_bad_table() -> None:
    with pytest.raises(FieldConfigError):
        GradientNoise(perm=np.arange(10))


def test_sine_value_noise_phase_from_seed() -> None:
    assert SineValueNoise.from_seed(0).phase == 0.0
    assert SineValueNoise.from_seed(54321).phase == pytest.approx(54.321)


def test_make_noise_rejects_unknown_kind() -> None:
    with pytest.raises(FieldConfigError):
        make_noise("simplex", 0)
