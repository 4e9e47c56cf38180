"""
どこで: `src/lightflow/core/spawn.py`。
何を: トレースの始点列（スポーンセット）を、random / grid / center / ring / radial-burst の各パターンで生成する。
なぜ: 始点の分布は絵の印象と後段の色/線幅の割り当てを決めるため、乱数源を明示して決定的に生成する。

パターン
--------
- `random`: 領域内の一様乱数。
- `grid`: `ceil(sqrt(count))` 列の格子（領域の辺を含む等間隔）。
- `center`: 領域中心まわりの極座標一様（半径/角度とも一様）。
- `ring`: 1 つの円周上に角度等間隔。半径は一様スケール（`radius_scale`）とガウスジッターで揺らす。
- `radial-burst`: 半径が `((k+1)/R)^0.7` で広がる同心リングと、中心付近の充填点。

どのパターンも結果は `count` 個ちょうどに切り詰める。乱数の消費順は点の生成順と一致する。
"""

from __future__ import annotations

import enum
import inspect
import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable

import numpy as np

from lightflow.core.bounds import Rect
from lightflow.core.errors import FieldConfigError
from lightflow.core.random import RandomSource
from lightflow.core.spawn_registry import spawn_pattern, spawn_registry

logger = logging.getLogger(__name__)

_TWO_PI = 2.0 * math.pi


class SpawnPattern(str, enum.Enum):
    RANDOM = "random"
    GRID = "grid"
    CENTER = "center"
    RING = "ring"
    RADIAL_BURST = "radial-burst"


@dataclass(frozen=True, slots=True)
class SpawnSet:
    """順序付きの始点列と、各点の ring index。

    Attributes
    ----------
    points : np.ndarray
        float64 型 shape (N, 2)。
    rings : np.ndarray
        int32 型 shape (N,)。リングを持たないパターンでは全て 0。
    """

    points: np.ndarray
    rings: np.ndarray

    def __post_init__(self) -> None:
        points = np.array(self.points, dtype=np.float64).reshape(-1, 2)
        rings = np.array(self.rings, dtype=np.int32).reshape(-1)
        if rings.shape[0] != points.shape[0]:
            raise ValueError(
                f"rings と points の長さが一致しない: points={points.shape[0]} rings={rings.shape[0]}"
            )
        points.setflags(write=False)
        rings.setflags(write=False)
        object.__setattr__(self, "points", points)
        object.__setattr__(self, "rings", rings)

    def __len__(self) -> int:
        return int(self.points.shape[0])


def _polar(cx: float, cy: float, angle: float, radius: float) -> tuple[float, float]:
    return (cx + math.cos(angle) * radius, cy + math.sin(angle) * radius)


@spawn_pattern(SpawnPattern.RANDOM.value)
def _random(count: int, region: Rect, rng: RandomSource) -> tuple[list[tuple[float, float]], list[int]]:
    points: list[tuple[float, float]] = []
    for _ in range(count):
        x = region.x0 + float(rng.random()) * region.width
        y = region.y0 + float(rng.random()) * region.height
        points.append((x, y))
    return points, [0] * len(points)


@spawn_pattern(SpawnPattern.GRID.value)
def _grid(count: int, region: Rect, rng: RandomSource) -> tuple[list[tuple[float, float]], list[int]]:
    cols = int(math.ceil(math.sqrt(count)))
    rows = int(math.ceil(count / cols))
    cx, cy = region.center
    points: list[tuple[float, float]] = []
    for i in range(count):
        col = i % cols
        row = i // cols
        # 1 列（1 行）しかない軸は中心に置く。
        x = cx if cols == 1 else region.x0 + (col / (cols - 1)) * region.width
        y = cy if rows == 1 else region.y0 + (row / (rows - 1)) * region.height
        points.append((x, y))
    return points, [0] * len(points)


@spawn_pattern(SpawnPattern.CENTER.value)
def _center(count: int, region: Rect, rng: RandomSource) -> tuple[list[tuple[float, float]], list[int]]:
    cx, cy = region.center
    max_radius = min(region.width, region.height) / 2.0
    points: list[tuple[float, float]] = []
    for _ in range(count):
        r = float(rng.random()) * max_radius
        theta = float(rng.random()) * _TWO_PI
        points.append(_polar(cx, cy, theta, r))
    return points, [0] * len(points)


def _check_ring(
    count: int,
    *,
    radius: float | None = None,
    jitter: float = 10.0,
    start_angle: float = 0.0,
    radius_scale: tuple[float, float] | None = None,
) -> tuple[float | None, float, tuple[float, float] | None]:
    r = None if radius is None else float(radius)
    if r is not None and (not math.isfinite(r) or r < 0.0):
        raise FieldConfigError(f"ring の radius は 0 以上である必要がある: got={radius!r}")
    sigma = float(jitter)
    if not math.isfinite(sigma) or sigma < 0.0:
        raise FieldConfigError(f"ring の jitter は 0 以上である必要がある: got={jitter!r}")
    if not math.isfinite(float(start_angle)):
        raise FieldConfigError(f"ring の start_angle は有限値である必要がある: got={start_angle!r}")
    scale = None
    if radius_scale is not None:
        try:
            lo, hi = radius_scale
            scale = (float(lo), float(hi))
        except Exception as exc:
            raise FieldConfigError(
                f"ring の radius_scale は (min, max) である必要がある: got={radius_scale!r}"
            ) from exc
        if not all(math.isfinite(v) and v >= 0.0 for v in scale) or scale[0] > scale[1]:
            raise FieldConfigError(
                f"ring の radius_scale は 0 <= min <= max である必要がある: got={radius_scale!r}"
            )
    return r, sigma, scale


def _check_radial_burst(
    count: int,
    *,
    rings: int = 12,
    ring_growth: float = 0.3,
    radius_exponent: float = 0.7,
    angle_jitter: float = 0.1,
    radius_jitter: float = 0.1,
    center_fraction: float = 0.1,
    center_radius: float = 0.3,
) -> int:
    if isinstance(rings, bool) or int(rings) != rings or int(rings) < 1:
        raise FieldConfigError(f"radial-burst の rings は 1 以上の整数である必要がある: got={rings!r}")
    n_rings = int(rings)
    if n_rings > count:
        raise FieldConfigError(
            f"radial-burst の rings が点数を超えている: rings={n_rings} count={count}"
        )
    for name, value in (
        ("ring_growth", ring_growth),
        ("angle_jitter", angle_jitter),
        ("radius_jitter", radius_jitter),
        ("center_fraction", center_fraction),
        ("center_radius", center_radius),
    ):
        if not math.isfinite(float(value)) or float(value) < 0.0:
            raise FieldConfigError(f"radial-burst の {name} は 0 以上である必要がある: got={value!r}")
    if not math.isfinite(float(radius_exponent)) or float(radius_exponent) <= 0.0:
        raise FieldConfigError(
            f"radial-burst の radius_exponent は正の値である必要がある: got={radius_exponent!r}"
        )
    return n_rings


# パターン固有オプションの検証。生成関数と `check_spawn_options()` の両方から使う。
_OPTION_CHECKS: dict[str, Callable[..., Any]] = {
    SpawnPattern.RING.value: _check_ring,
    SpawnPattern.RADIAL_BURST.value: _check_radial_burst,
}


@spawn_pattern(SpawnPattern.RING.value, aliases=("circle",))
def _ring(
    count: int,
    region: Rect,
    rng: RandomSource,
    *,
    radius: float | None = None,
    jitter: float = 10.0,
    start_angle: float = 0.0,
    radius_scale: tuple[float, float] | None = None,
) -> tuple[list[tuple[float, float]], list[int]]:
    r, sigma, scale = _check_ring(
        count, radius=radius, jitter=jitter, start_angle=start_angle, radius_scale=radius_scale
    )
    cx, cy = region.center
    if r is None:
        r = min(region.width, region.height) * 0.4

    points: list[tuple[float, float]] = []
    for i in range(count):
        angle = float(start_angle) + (i / count) * _TWO_PI
        ri = r
        if scale is not None:
            ri = r * (scale[0] + float(rng.random()) * (scale[1] - scale[0]))
        if sigma > 0.0:
            ri += float(rng.normal(0.0, sigma))
        points.append(_polar(cx, cy, angle, ri))
    return points, [0] * len(points)


@spawn_pattern(SpawnPattern.RADIAL_BURST.value)
def _radial_burst(
    count: int,
    region: Rect,
    rng: RandomSource,
    *,
    rings: int = 12,
    ring_growth: float = 0.3,
    radius_exponent: float = 0.7,
    angle_jitter: float = 0.1,
    radius_jitter: float = 0.1,
    center_fraction: float = 0.1,
    center_radius: float = 0.3,
) -> tuple[list[tuple[float, float]], list[int]]:
    n_rings = _check_radial_burst(
        count,
        rings=rings,
        ring_growth=ring_growth,
        radius_exponent=radius_exponent,
        angle_jitter=angle_jitter,
        radius_jitter=radius_jitter,
        center_fraction=center_fraction,
        center_radius=center_radius,
    )

    cx, cy = region.center
    max_radius = min(region.width, region.height) / 2.0
    per_ring = count // n_rings

    points: list[tuple[float, float]] = []
    ring_ids: list[int] = []
    for ring in range(n_rings):
        ring_radius = max_radius * ((ring + 1) / n_rings) ** float(radius_exponent)
        n = int(math.floor(per_ring * (1.0 + ring * float(ring_growth))))
        for i in range(n):
            if len(points) >= count:
                break
            angle = (i / n) * _TWO_PI + float(rng.normal(0.0, float(angle_jitter)))
            offset = float(rng.normal(0.0, ring_radius * float(radius_jitter)))
            points.append(_polar(cx, cy, angle, ring_radius + offset))
            ring_ids.append(ring)

    # 中心付近の充填。リングが不足した分もここで補う。
    n_center = max(int(math.floor(count * float(center_fraction))), count - len(points))
    for _ in range(n_center):
        r = float(rng.random()) * max_radius * float(center_radius)
        theta = float(rng.random()) * _TWO_PI
        points.append(_polar(cx, cy, theta, r))
        ring_ids.append(0)

    return points, ring_ids


def check_spawn_options(pattern: SpawnPattern | str, count: int, options: Mapping[str, Any]) -> str:
    """パターン名・点数・オプションを生成前に検証し、正規のパターン名を返す。

    `FlowSketch` の構築時と `spawn_points()` の両方がこの関数を通る。

    Raises
    ------
    FieldConfigError
        未知のパターン、負の count、未知のオプション、パターン固有の値の不正
        （radial-burst の `rings > count` を含む。count が 0 のときは点を作らないので問わない）。
    """
    try:
        name = spawn_registry.resolve(pattern)
    except KeyError as exc:
        known = ", ".join(spawn_registry.names())
        raise FieldConfigError(f"未対応の spawn pattern: {pattern!r}（{known}）") from exc

    if isinstance(count, bool) or int(count) != count or int(count) < 0:
        raise FieldConfigError(f"count は 0 以上の整数である必要がある: got={count!r}")

    accepted = {
        p.name
        for p in inspect.signature(spawn_registry.get(name)).parameters.values()
        if p.kind is inspect.Parameter.KEYWORD_ONLY
    }
    unknown = sorted(k for k in options if k not in accepted)
    if unknown:
        raise FieldConfigError(f"spawn pattern {name!r} に未知のオプション: {unknown}")

    check = _OPTION_CHECKS.get(name)
    if check is not None and int(count) > 0:
        check(int(count), **options)
    return name


def spawn_points(
    pattern: SpawnPattern | str,
    count: int,
    region: Rect,
    rng: RandomSource,
    **options: Any,
) -> SpawnSet:
    """パターン名から始点列を生成する。

    Parameters
    ----------
    pattern : SpawnPattern or str
        パターン名（`"circle"` は `"ring"` の別名）。
    count : int
        要求点数。0 なら空のセット。
    region : Rect
        生成領域（通常はマージン内側の矩形）。
    rng : RandomSource
        乱数源。呼び出しごとに状態を進める。
    **options
        パターン固有の追加パラメータ（ring / radial-burst のみ）。

    Returns
    -------
    SpawnSet
        ちょうど `count` 個の始点と ring index。

    Raises
    ------
    FieldConfigError
        未知のパターン、負の count、パターン固有の設定不正。
    """
    name = check_spawn_options(pattern, count, options)
    n = int(count)
    if n == 0:
        return SpawnSet(points=np.zeros((0, 2), dtype=np.float64), rings=np.zeros((0,), dtype=np.int32))

    points, rings = spawn_registry.get(name)(n, region, rng, **options)
    if len(points) < n:
        raise RuntimeError(f"spawn pattern {name!r} が {n} 点を生成できなかった: got={len(points)}")

    out = SpawnSet(points=points[:n], rings=rings[:n])
    outside = int(
        np.count_nonzero(
            (out.points[:, 0] < region.x0)
            | (out.points[:, 0] > region.x1)
            | (out.points[:, 1] < region.y0)
            | (out.points[:, 1] > region.y1)
        )
    )
    if outside:
        logger.debug("spawn pattern %s: %d/%d 点が領域外に出た", name, outside, n)
    return out


__all__ = ["SpawnPattern", "SpawnSet", "check_spawn_options", "spawn_points"]
