"""core.stripes（zip ストライプ列の生成）をテスト。"""

from __future__ import annotations

import math

import pytest

from lightflow.core.errors import FieldConfigError
from lightflow.core.random import Lcg
from lightflow.core.stripes import StripeParams, generate_stripes, realize_stripes

_PALETTE = ("#1a1a1a", "#404040", "#707070", "#c8c8c8")


def _params(**overrides) -> StripeParams:
    base = dict(palette=_PALETTE, accents=("#2563eb", "#f59e0b"))
    base.update(overrides)
    return StripeParams(**base)


def _in_width_class(w: float, params: StripeParams) -> bool:
    return (
        params.min_width <= w < params.min_width + 4.0
        or 8.0 <= w < 28.0
        or 30.0 <= w < params.max_width
    )


def _in_gap_class(g: float) -> bool:
    return 1.0 <= g < 4.0 or 4.0 <= g < 19.0 or 20.0 <= g < 60.0


def test_generate_stripes_is_deterministic_for_lcg_42() -> None:
    params = _params()
    a = generate_stripes(params, Lcg(42))
    b = generate_stripes(params, Lcg(42))
    assert a == b
    assert a[0].x == 0.0
    assert a != generate_stripes(params, Lcg(43))


def test_first_stripe_follows_draw_order() -> None:
    params = _params()
    stripes = generate_stripes(params, Lcg(42))

    ref = Lcg(42)
    roll = ref.random()
    if roll < 0.2:
        width = params.min_width + ref.random() * 4.0
    elif roll < 0.5:
        width = 8.0 + ref.random() * 20.0
    else:
        width = 30.0 + ref.random() * (params.max_width - 30.0)
    color_index = math.floor(ref.random() * len(params.palette))
    ref.random()  # アクセント判定（先頭は accent_after 以下なので外れ扱い）
    opacity = 0.6 + ref.random() * 0.4
    gap_roll = ref.random()
    u = ref.random()
    if gap_roll < 0.4:
        gap = 1.0 + u * 3.0
    elif gap_roll < 0.8:
        gap = 4.0 + u * 15.0
    else:
        gap = 20.0 + u * 40.0

    first = stripes[0]
    assert first.width == pytest.approx(width)
    assert first.color_index == color_index
    assert first.color == params.palette[color_index]
    assert first.accent is False
    assert first.opacity == pytest.approx(opacity)
    assert stripes[1].x == pytest.approx(width + gap)


def test_widths_and_gaps_stay_in_their_classes() -> None:
    params = _params(zone_width=1e9, stripe_count=400)
    stripes = generate_stripes(params, Lcg(7))
    assert len(stripes) == 400
    for s in stripes:
        assert _in_width_class(s.width, params)
        assert 0.6 <= s.opacity <= 1.0
    for prev, cur in zip(stripes, stripes[1:]):
        assert _in_gap_class(cur.x - prev.x - prev.width)


def test_generation_stops_at_zone_width() -> None:
    params = _params(zone_width=300.0, stripe_count=1000)
    stripes = generate_stripes(params, Lcg(42))
    assert 0 < len(stripes) < 1000
    assert all(s.x < 300.0 for s in stripes)
    # 1 本あたりの前進は幅 2 + 間隔 1 以上。
    assert len(stripes) <= math.ceil(300.0 / 3.0)


def test_generation_stops_at_stripe_count() -> None:
    stripes = generate_stripes(_params(zone_width=1e9, stripe_count=5), Lcg(42))
    assert len(stripes) == 5
    assert generate_stripes(_params(stripe_count=0), Lcg(42)) == ()


def test_accents_wait_for_accent_after() -> None:
    params = _params(zone_width=1e9, stripe_count=12, accent_chance=1.0, accent_after=3)
    stripes = generate_stripes(params, Lcg(42))
    assert not any(s.accent for s in stripes[:4])
    assert all(s.accent for s in stripes[4:])
    assert all(s.color in params.accents for s in stripes[4:])


def test_no_accents_without_accent_colors() -> None:
    params = _params(accents=(), zone_width=1e9, stripe_count=20, accent_chance=1.0, accent_after=0)
    stripes = generate_stripes(params, Lcg(42))
    assert not any(s.accent for s in stripes)
    assert all(s.color in _PALETTE for s in stripes)


def test_realize_stripes_uses_configured_rng_kind() -> None:
    lcg = _params(rng="lcg")
    assert realize_stripes(lcg, 42) == generate_stripes(lcg, Lcg(42))
    np_params = _params(rng="numpy")
    assert realize_stripes(np_params, "banner") == realize_stripes(np_params, "banner")


@pytest.mark.parametrize(
    "overrides",
    [
        {"zone_width": 0.0},
        {"height": -1.0},
        {"min_width": 0.0},
        {"max_width": 20.0},
        {"stripe_count": -1},
        {"stripe_count": 2.5},
        {"accent_after": True},
        {"accent_chance": 1.5},
        {"palette": ()},
        {"rng": "mt19937"},
        {"seed": -3},
    ],
)
def test_stripe_params_reject_invalid_values(overrides: dict) -> None:
    with pytest.raises(FieldConfigError):
        _params(**overrides)
