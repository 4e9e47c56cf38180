"""
どこで: `src/lightflow/core/stripes.py`。
何を: 幅と間隔がばらつく縦ストライプ（zip）の並びを、乱数源から決定的に生成する。
なぜ: バナーやロゴの矩形に敷くストライプを、流線と同じくシードだけで再現できるようにするため。

生成規則
--------
1 本ごとに次の順で乱数を消費する。

1. 幅クラス（hairline 20% / medium 30% / wide 50%）と、クラス内の幅。
2. パレット色。
3. アクセント判定（毎回 1 回引く）。当たり、かつ既に `accent_after` 本より多く並んでいればアクセント色を引く。
4. 不透明度 `0.6 + U * 0.4`。
5. 間隔クラス（tight 40% / medium 40% / wide 20%）と、クラス内の間隔。

`x` がゾーン幅に達するか、本数が `stripe_count` に達したら終了する。
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from lightflow.core.errors import FieldConfigError
from lightflow.core.random import RNG_KINDS, RandomSource, Seed, make_random_source, seed_to_int

logger = logging.getLogger(__name__)

# 幅クラスの範囲。hairline は `min_width` から、wide は `max_width` まで。
_HAIRLINE_SPAN = 4.0
_MEDIUM_WIDTH = (8.0, 20.0)
_WIDE_MIN = 30.0


@dataclass(frozen=True, slots=True)
class Stripe:
    """1 本のストライプ。

    Attributes
    ----------
    x : float
        左端（ゾーン左端からの距離）。
    width : float
        幅。
    color_index : int
        `accent` が False なら `palette`、True なら `accents` の index。
    accent : bool
        アクセント色かどうか。
    opacity : float
        不透明度（0.6..1.0）。
    color : str
        解決済みの色。
    """

    x: float
    width: float
    color_index: int
    accent: bool
    opacity: float
    color: str


@dataclass(frozen=True, slots=True)
class StripeParams:
    """ストライプ列の生成パラメータ。

    Attributes
    ----------
    zone_width : float
        ストライプを並べる横幅。
    height : float
        ストライプの高さ（描画側が使う）。
    stripe_count : int
        最大本数。
    min_width, max_width : float
        hairline 幅の下限と wide 幅の上限（`max_width >= 30`）。
    palette, accents : tuple[str, ...]
        通常色とアクセント色。
    accent_chance : float
        アクセント色になる確率。
    accent_after : int
        この本数を超えて並ぶまではアクセントを使わない。
    rng : str
        `"lcg"` または `"numpy"`。
    background : str
        背景色（描画側が使う）。
    seed : int or str or None
        固有シード。None なら呼び出し側の既定シード。
    """

    zone_width: float = 1500.0
    height: float = 500.0
    stripe_count: int = 60
    min_width: float = 2.0
    max_width: float = 80.0
    palette: tuple[str, ...] = ("#1a1a1a",)
    accents: tuple[str, ...] = ()
    accent_chance: float = 0.025
    accent_after: int = 5
    rng: str = "lcg"
    background: str = "#f5f3f0"
    seed: Seed | None = None

    def __post_init__(self) -> None:
        for name in ("zone_width", "height", "min_width"):
            v = float(getattr(self, name))
            if not math.isfinite(v) or v <= 0.0:
                raise FieldConfigError(f"{name} は正の値である必要がある: got={v!r}")
            object.__setattr__(self, name, v)
        max_width = float(self.max_width)
        if not math.isfinite(max_width) or max_width < _WIDE_MIN:
            raise FieldConfigError(f"max_width は {_WIDE_MIN} 以上である必要がある: got={self.max_width!r}")
        object.__setattr__(self, "max_width", max_width)
        for name in ("stripe_count", "accent_after"):
            v = getattr(self, name)
            if isinstance(v, bool) or int(v) != v or int(v) < 0:
                raise FieldConfigError(f"{name} は 0 以上の整数である必要がある: got={v!r}")
            object.__setattr__(self, name, int(v))
        chance = float(self.accent_chance)
        if not (0.0 <= chance <= 1.0):
            raise FieldConfigError(f"accent_chance は 0..1 の範囲である必要がある: got={self.accent_chance!r}")
        object.__setattr__(self, "accent_chance", chance)

        palette = tuple(str(c) for c in self.palette)
        if not palette:
            raise FieldConfigError("palette は 1 色以上である必要がある")
        object.__setattr__(self, "palette", palette)
        object.__setattr__(self, "accents", tuple(str(c) for c in self.accents))

        k = str(self.rng).strip().lower()
        if k not in RNG_KINDS:
            raise FieldConfigError(f"未対応の rng kind: {self.rng!r}（{', '.join(RNG_KINDS)}）")
        object.__setattr__(self, "rng", k)
        if self.seed is not None:
            seed_to_int(self.seed)


def _stripe_width(params: StripeParams, rng: RandomSource) -> float:
    roll = float(rng.random())
    if roll < 0.2:
        return params.min_width + float(rng.random()) * _HAIRLINE_SPAN
    if roll < 0.5:
        return _MEDIUM_WIDTH[0] + float(rng.random()) * _MEDIUM_WIDTH[1]
    return _WIDE_MIN + float(rng.random()) * (params.max_width - _WIDE_MIN)


def _gap(rng: RandomSource) -> float:
    roll = float(rng.random())
    if roll < 0.4:
        return 1.0 + float(rng.random()) * 3.0
    if roll < 0.8:
        return 4.0 + float(rng.random()) * 15.0
    return 20.0 + float(rng.random()) * 40.0


def generate_stripes(params: StripeParams, rng: RandomSource) -> tuple[Stripe, ...]:
    """ストライプ列を生成する。

    Parameters
    ----------
    params : StripeParams
        生成パラメータ。
    rng : RandomSource
        乱数源。消費順はモジュール docstring の通り。

    Returns
    -------
    tuple[Stripe, ...]
        左から順のストライプ。最後の 1 本はゾーン右端をはみ出すことがある。
    """
    n_colors = len(params.palette)
    stripes: list[Stripe] = []
    x = 0.0
    while x < params.zone_width and len(stripes) < params.stripe_count:
        width = _stripe_width(params, rng)

        color_index = min(int(math.floor(float(rng.random()) * n_colors)), n_colors - 1)
        accent = False
        if float(rng.random()) < params.accent_chance and len(stripes) > params.accent_after and params.accents:
            n_accents = len(params.accents)
            color_index = min(int(math.floor(float(rng.random()) * n_accents)), n_accents - 1)
            accent = True

        opacity = 0.6 + float(rng.random()) * 0.4
        color = params.accents[color_index] if accent else params.palette[color_index]
        stripes.append(
            Stripe(x=x, width=width, color_index=color_index, accent=accent, opacity=opacity, color=color)
        )
        x += width + _gap(rng)

    logger.debug("generate_stripes: %d 本 (zone_width=%s)", len(stripes), params.zone_width)
    return tuple(stripes)


def realize_stripes(params: StripeParams, seed: Seed) -> tuple[Stripe, ...]:
    """シードから乱数源を新しく作って `generate_stripes()` を呼ぶ。"""
    return generate_stripes(params, make_random_source(params.rng, seed))


__all__ = ["Stripe", "StripeParams", "generate_stripes", "realize_stripes"]
