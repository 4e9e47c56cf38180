"""
どこで: `src/lightflow/core/field.py`。
何を: ノイズ原始関数から角度場（`(x, y) -> angle`）を組み立てる。
なぜ: トレーサーを具体的な合成方法（ノイズのみ / 放射ブレンド / 外向き）から切り離すため。

合成方法
--------
- `NoiseField`: 多オクターブのノイズ角。
- `RadialBlendField`: 中心からの放射角とノイズ角を距離依存の重みでブレンドし、ねじれを加える。
- `OutwardField`: 放射角を主とし、中心から遠いほどノイズで曲げる。
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

from lightflow.core.bounds import Rect
from lightflow.core.errors import FieldConfigError
from lightflow.core.noise import NoisePrimitive
from lightflow.core.params import FieldParams

AngleFunc = Callable[[float, float], float]
"""座標 (x, y) から進行方向 [rad] を返す関数。"""

COMPOSITIONS: tuple[str, ...] = ("noise", "radial", "outward")


@dataclass(frozen=True, slots=True)
class NoiseField:
    """多オクターブのノイズ角度場。

    Parameters
    ----------
    params : FieldParams
        周波数/振幅/オクターブ設定。
    noise : NoisePrimitive
        [-1, 1] を返すノイズ原始関数。

    Notes
    -----
    オクターブ i は `(x * f_i, y * f_i, t)` をサンプルし、`f_0 = noise_scale`、
    `f_{i+1} = f_i * lacunarity`。振幅は 1 から始めて `persistence` 倍していく。
    和を振幅和で割って正規化し、最後に `amplitude` を掛ける。
    """

    params: FieldParams
    noise: NoisePrimitive

    def angle(self, x: float, y: float, t: float = 0.0) -> float:
        p = self.params
        total = 0.0
        amp = 1.0
        amp_sum = 0.0
        freq = p.noise_scale
        for _ in range(p.octaves):
            total += self.noise.sample(x * freq, y * freq, t) * amp
            amp_sum += amp
            amp *= p.persistence
            freq *= p.lacunarity
        return (total / amp_sum) * p.amplitude

    def __call__(self, x: float, y: float) -> float:
        return self.angle(x, y)


def _radial_angle(dx: float, dy: float) -> float:
    # 中心ちょうどでは方向が定まらないので 0 とする。
    if dx == 0.0 and dy == 0.0:
        return 0.0
    return math.atan2(dy, dx)


def _require_center(center: tuple[float, float], max_distance: float) -> None:
    if len(center) != 2 or not all(math.isfinite(float(c)) for c in center):
        raise FieldConfigError(f"center は有限値の (x, y) である必要がある: got={center!r}")
    if not math.isfinite(float(max_distance)) or float(max_distance) <= 0.0:
        raise FieldConfigError(f"max_distance は正の値である必要がある: got={max_distance!r}")


@dataclass(frozen=True, slots=True)
class RadialBlendField:
    """放射角とノイズ角のブレンドにねじれを加えた角度場。

    `w = radial_weight * (1 - d * radial_falloff)` として
    `angle = radial * w + noise * (1 - w) + d * spiral_twist * π`。
    `d` は中心からの距離を `max_distance` で割った値。
    """

    field: NoiseField
    center: tuple[float, float]
    max_distance: float

    def __post_init__(self) -> None:
        _require_center(self.center, self.max_distance)
        object.__setattr__(self, "center", (float(self.center[0]), float(self.center[1])))
        object.__setattr__(self, "max_distance", float(self.max_distance))

    def __call__(self, x: float, y: float) -> float:
        p = self.field.params
        dx = x - self.center[0]
        dy = y - self.center[1]
        d = math.sqrt(dx * dx + dy * dy) / self.max_distance
        weight = p.radial_weight * (1.0 - d * p.radial_falloff)
        spiral = d * p.spiral_twist * math.pi
        return _radial_angle(dx, dy) * weight + self.field.angle(x, y) * (1.0 - weight) + spiral


@dataclass(frozen=True, slots=True)
class OutwardField:
    """中心から外向きの放射角を、距離に比例したノイズ角で曲げる角度場。

    `angle = radial + noise * d * (1 - radial_weight)`。
    """

    field: NoiseField
    center: tuple[float, float]
    max_distance: float

    def __post_init__(self) -> None:
        _require_center(self.center, self.max_distance)
        object.__setattr__(self, "center", (float(self.center[0]), float(self.center[1])))
        object.__setattr__(self, "max_distance", float(self.max_distance))

    def __call__(self, x: float, y: float) -> float:
        dx = x - self.center[0]
        dy = y - self.center[1]
        d = math.sqrt(dx * dx + dy * dy) / self.max_distance
        noise_angle = self.field.angle(x, y) * d
        return _radial_angle(dx, dy) + noise_angle * (1.0 - self.field.params.radial_weight)


def build_angle_field(
    composition: str,
    params: FieldParams,
    noise: NoisePrimitive,
    canvas: Rect,
) -> AngleFunc:
    """合成方法の名前から角度場を組み立てる。

    Parameters
    ----------
    composition : str
        `"noise"` / `"radial"` / `"outward"`。
    params : FieldParams
        フィールドパラメータ。
    noise : NoisePrimitive
        ノイズ原始関数。
    canvas : Rect
        放射成分の中心（矩形中心）と正規化距離（半対角線）の基準。

    Returns
    -------
    AngleFunc
        picklable な角度場オブジェクト。
    """
    field = NoiseField(params=params, noise=noise)
    c = str(composition).strip().lower()
    if c == "noise":
        return field
    if c == "radial":
        return RadialBlendField(field=field, center=canvas.center, max_distance=canvas.half_diagonal)
    if c == "outward":
        return OutwardField(field=field, center=canvas.center, max_distance=canvas.half_diagonal)
    raise FieldConfigError(f"未対応の composition: {composition!r}（{', '.join(COMPOSITIONS)}）")


__all__ = [
    "AngleFunc",
    "COMPOSITIONS",
    "NoiseField",
    "OutwardField",
    "RadialBlendField",
    "build_angle_field",
]
