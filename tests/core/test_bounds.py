"""core.bounds の Rect をテスト。"""

from __future__ import annotations

import math

import pytest

from lightflow.core.bounds import Rect
from lightflow.core.errors import FieldConfigError


def test_rect_contains_is_edge_inclusive() -> None:
    r = Rect(-10.0, -10.0, 10.0, 10.0)
    assert r.contains(10.0, 0.0)
    assert r.contains(-10.0, -10.0)
    assert not r.contains(10.000001, 0.0)
    assert not r.contains(0.0, -10.5)


def test_rect_rejects_zero_or_negative_size() -> None:
    with pytest.raises(FieldConfigError):
        Rect(0.0, 0.0, 0.0, 10.0)
    with pytest.raises(FieldConfigError):
        Rect(0.0, 10.0, 10.0, 5.0)
    with pytest.raises(FieldConfigError):
        Rect(0.0, 0.0, math.inf, 10.0)


def test_rect_inset_uses_margin_ratio_per_axis() -> None:
    inner = Rect.canvas(1000.0, 500.0).inset(0.1)
    assert inner == Rect(100.0, 50.0, 900.0, 450.0)
    assert inner.center == (500.0, 250.0)


def test_rect_inset_validates_margin() -> None:
    with pytest.raises(FieldConfigError):
        Rect.canvas(10.0, 10.0).inset(0.5)
    with pytest.raises(FieldConfigError):
        Rect.canvas(10.0, 10.0).inset(-0.1)


def test_rect_half_diagonal() -> None:
    assert Rect.canvas(6.0, 8.0).half_diagonal == pytest.approx(5.0)
