"""
どこで: `src/lightflow/core/params.py`。
何を: フィールド合成パラメータ `FieldParams` とトレースパラメータ `TraceParams` を定義する。
なぜ: スクリプト内で直接書き換えられていたパラメータ表を、構築時に検証される不変レコードへ置き換えるため。
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from lightflow.core.bounds import Rect
from lightflow.core.errors import FieldConfigError


def _require_finite(name: str, value: float) -> float:
    v = float(value)
    if not math.isfinite(v):
        raise FieldConfigError(f"{name} は有限値である必要がある: got={value!r}")
    return v


def _require_positive(name: str, value: float) -> float:
    v = _require_finite(name, value)
    if v <= 0.0:
        raise FieldConfigError(f"{name} は正の値である必要がある: got={value!r}")
    return v


@dataclass(frozen=True, slots=True)
class FieldParams:
    """ノイズ角度場の合成パラメータ。

    Attributes
    ----------
    noise_scale : float
        空間周波数。第 1 オクターブのサンプル座標は `x * noise_scale`。
    amplitude : float
        出力角度の振幅 [rad]。出力は `[-amplitude, amplitude]` に収まる。
    octaves : int
        重ねるオクターブ数（1 以上）。
    lacunarity : float
        オクターブごとの周波数倍率。
    persistence : float
        オクターブごとの振幅倍率。
    radial_weight : float
        放射方向角との合成重み（0..1）。0 でノイズのみ。
    radial_falloff : float
        中心からの正規化距離に応じた `radial_weight` の減衰率（0..1）。
    spiral_twist : float
        正規化距離に比例して加えるねじれ量（π 単位）。
    """

    noise_scale: float = 0.002
    amplitude: float = 2.0 * math.pi
    octaves: int = 1
    lacunarity: float = 2.0
    persistence: float = 0.5
    radial_weight: float = 0.0
    radial_falloff: float = 0.0
    spiral_twist: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "noise_scale", _require_positive("noise_scale", self.noise_scale))
        object.__setattr__(self, "amplitude", _require_finite("amplitude", self.amplitude))
        if isinstance(self.octaves, bool) or int(self.octaves) != self.octaves or int(self.octaves) < 1:
            raise FieldConfigError(f"octaves は 1 以上の整数である必要がある: got={self.octaves!r}")
        object.__setattr__(self, "octaves", int(self.octaves))
        object.__setattr__(self, "lacunarity", _require_positive("lacunarity", self.lacunarity))
        object.__setattr__(self, "persistence", _require_positive("persistence", self.persistence))

        for name in ("radial_weight", "radial_falloff"):
            v = _require_finite(name, getattr(self, name))
            if not (0.0 <= v <= 1.0):
                raise FieldConfigError(f"{name} は 0..1 の範囲である必要がある: got={v!r}")
            object.__setattr__(self, name, v)
        object.__setattr__(self, "spiral_twist", _require_finite("spiral_twist", self.spiral_twist))

    @property
    def is_radial(self) -> bool:
        """放射/ねじれ成分を持つかどうか。"""
        return self.radial_weight != 0.0 or self.spiral_twist != 0.0


@dataclass(frozen=True, slots=True)
class TraceParams:
    """1 本のトレースの進め方と打ち切り条件。

    Attributes
    ----------
    step : float
        1 反復あたりの前進距離。正の値。
    max_steps : int
        記録する点の最大数。0 以上。
    bounds : Rect
        この矩形を（厳密に）出た時点でトレースを打ち切る。
    """

    step: float
    max_steps: int
    bounds: Rect

    def __post_init__(self) -> None:
        object.__setattr__(self, "step", _require_positive("step", self.step))
        if isinstance(self.max_steps, bool) or int(self.max_steps) != self.max_steps or int(self.max_steps) < 0:
            raise FieldConfigError(f"max_steps は 0 以上の整数である必要がある: got={self.max_steps!r}")
        object.__setattr__(self, "max_steps", int(self.max_steps))
        if not isinstance(self.bounds, Rect):
            raise FieldConfigError(f"bounds は Rect である必要がある: got={type(self.bounds)!r}")


__all__ = ["FieldParams", "TraceParams"]
