"""
どこで: `src/lightflow/core/lissajous.py`。リサージュ曲線の点列生成。
何を: 周波数比・位相・サンプル数から、XY 平面上のリサージュ曲線を 1 本のポリラインとして生成する。
なぜ: ロゴ用の周期曲線を、流線と同じ `(N, 2)` 点列表現で描画/書き出し側へ渡すため。
"""

from __future__ import annotations

import math

import numpy as np

from lightflow.core.errors import FieldConfigError
from lightflow.core.geometry import Polyline


def lissajous(
    a: int,
    b: int,
    *,
    delta: float = 0.0,
    steps: int = 1000,
    center: tuple[float, float] = (0.0, 0.0),
    radius: float = 1.0,
) -> Polyline:
    """リサージュ曲線を 1 本のポリラインとして生成する。

    Parameters
    ----------
    a : int
        X 方向の角周波数係数（1 以上）。
    b : int
        Y 方向の角周波数係数（1 以上）。
    delta : float, optional
        X 方向の位相 [rad]。
    steps : int, optional
        分割数。点数は `steps + 1`。1 未満は `FieldConfigError`。
    center : tuple[float, float], optional
        平行移動 (cx, cy)。
    radius : float, optional
        等方スケール倍率。

    Returns
    -------
    np.ndarray
        shape (steps + 1, 2), float64。

    Notes
    -----
    `t ∈ [0, 2π * max(a, b)]` を等間隔にサンプルするので、整数比なら始点と終点が一致する。
    """
    steps_i = int(steps)
    if steps_i < 1:
        raise FieldConfigError(f"lissajous の steps は 1 以上である必要がある: got={steps!r}")
    a_i = int(a)
    b_i = int(b)
    if a_i < 1 or b_i < 1:
        raise FieldConfigError(f"lissajous の a, b は 1 以上である必要がある: got=({a!r}, {b!r})")

    try:
        cx, cy = center
    except Exception as exc:
        raise FieldConfigError("lissajous の center は長さ 2 のシーケンスである必要がある") from exc

    t_max = 2.0 * math.pi * max(a_i, b_i)
    t = (np.arange(steps_i + 1, dtype=np.float64) / float(steps_i)) * t_max
    x = float(cx) + np.sin(a_i * t + float(delta)) * float(radius)
    y = float(cy) + np.sin(b_i * t) * float(radius)

    coords = np.stack([x, y], axis=1)
    coords.setflags(write=False)
    return coords


__all__ = ["lissajous"]
