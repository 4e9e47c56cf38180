"""流線ごとの色 index / 線幅 / 不透明度と、線に沿ったテーパーを計算する。"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from lightflow.core.errors import FieldConfigError
from lightflow.core.random import RandomSource

STYLE_MODES: tuple[str, ...] = ("uniform", "radial")


@dataclass(frozen=True, slots=True)
class LineStyle:
    """1 本の流線の描画属性。"""

    width: float
    opacity: float
    color_index: int


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def normalized_distance(
    points: np.ndarray,
    center: tuple[float, float],
    max_distance: float,
) -> np.ndarray:
    """各点の中心からの距離を `max_distance` で割った値を返す。

    Parameters
    ----------
    points : np.ndarray
        shape (N, 2)。
    center : tuple[float, float]
        中心 (x, y)。
    max_distance : float
        正規化に使う距離（通常はキャンバスの半対角線）。
    """
    if float(max_distance) <= 0.0:
        raise FieldConfigError(f"max_distance は正の値である必要がある: got={max_distance!r}")
    p = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    dx = p[:, 0] - float(center[0])
    dy = p[:, 1] - float(center[1])
    return np.sqrt(dx * dx + dy * dy) / float(max_distance)


def palette_index(nd: float, n_colors: int) -> int:
    """正規化距離からパレット index を選ぶ（中心ほど先頭の色）。"""
    n = int(n_colors)
    if n < 1:
        raise FieldConfigError(f"n_colors は 1 以上である必要がある: got={n_colors!r}")
    idx = int(math.floor(float(nd) * (n - 1)))
    return max(0, min(idx, n - 1))


def uniform_line_style(
    index: int,
    rng: RandomSource,
    *,
    width_range: tuple[float, float],
    opacity_range: tuple[float, float],
    n_colors: int,
) -> LineStyle:
    """線幅/不透明度を範囲内の一様乱数で決め、色は描画順で巡回させる。

    乱数は線幅 → 不透明度の順に 1 回ずつ消費する。
    """
    width = lerp(float(width_range[0]), float(width_range[1]), float(rng.random()))
    opacity = lerp(float(opacity_range[0]), float(opacity_range[1]), float(rng.random()))
    return LineStyle(width=width, opacity=opacity, color_index=int(index) % max(1, int(n_colors)))


def radial_line_style(
    nd: float,
    rng: RandomSource,
    *,
    width_range: tuple[float, float],
    opacity_range: tuple[float, float],
    n_colors: int,
) -> LineStyle:
    """中心に近いほど太く・濃く・先頭寄りの色にする。

    - 線幅: `lerp(max, min, nd) * (0.5 + U * 0.5)`
    - 不透明度: `lerp(max, min, nd * 0.7) * (0.7 + U * 0.3)`

    乱数は線幅 → 不透明度の順に 1 回ずつ消費する。
    """
    d = float(nd)
    w_min, w_max = float(width_range[0]), float(width_range[1])
    o_min, o_max = float(opacity_range[0]), float(opacity_range[1])
    width = lerp(w_max, w_min, d) * (0.5 + float(rng.random()) * 0.5)
    opacity = lerp(o_max, o_min, d * 0.7) * (0.7 + float(rng.random()) * 0.3)
    return LineStyle(width=width, opacity=opacity, color_index=palette_index(d, n_colors))


def taper(
    n_points: int,
    width: float,
    opacity: float,
    *,
    width_taper: float = 0.8,
    opacity_taper: float = 0.5,
) -> tuple[np.ndarray, np.ndarray]:
    """線に沿って細く/薄くなるセグメントごとの線幅と不透明度を返す。

    Parameters
    ----------
    n_points : int
        ポリラインの点数。セグメント数は `n_points - 1`。
    width, opacity : float
        始点側の線幅と不透明度。
    width_taper, opacity_taper : float
        終点側で失う割合。

    Returns
    -------
    tuple[np.ndarray, np.ndarray]
        shape (n_points - 1,) の (widths, opacities)。2 点未満なら空配列。
    """
    n = int(n_points)
    if n < 2:
        empty = np.zeros((0,), dtype=np.float64)
        return empty, empty.copy()
    t = np.arange(n - 1, dtype=np.float64) / float(n - 1)
    widths = float(width) * (1.0 - t * float(width_taper))
    opacities = float(opacity) * (1.0 - t * float(opacity_taper))
    return widths, opacities


__all__ = [
    "LineStyle",
    "STYLE_MODES",
    "lerp",
    "normalized_distance",
    "palette_index",
    "radial_line_style",
    "taper",
    "uniform_line_style",
]
