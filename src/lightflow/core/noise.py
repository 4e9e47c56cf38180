"""
どこで: `src/lightflow/core/noise.py`。
何を: シード付きの連続ノイズ原始関数（勾配ノイズ / サインハッシュの値ノイズ）を提供する。
なぜ: 角度場の合成を具体的なノイズアルゴリズムから切り離し、同一シード・同一座標で同一値を返す契約を守るため。

実装メモ
--------
- どちらの原始関数も出力を [-1, 1] にクランプする（オクターブ正規化の上限保証のため）。
- 内部カーネルは numba でコンパイルする。状態は不変の配列/スカラだけで、呼び出し間で共有される可変状態はない。
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol

import numpy as np
from numba import njit  # type: ignore[import-untyped]

from lightflow.core.errors import FieldConfigError
from lightflow.core.random import Seed, seed_to_int

# 勾配ノイズ用 rng をスポーン用 rng と別系列にするための追加エントロピー。
_NOISE_STREAM = 0x6E6F6973


class NoisePrimitive(Protocol):
    """`sample(x, y, t)` が [-1, 1] の連続値を返すノイズ原始関数。"""

    def sample(self, x: float, y: float, t: float = 0.0) -> float: ...


@njit(cache=True)
def _fade(t: float) -> float:
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


@njit(cache=True)
def _lerp(t: float, a: float, b: float) -> float:
    return a + t * (b - a)


@njit(cache=True)
def _grad(h: int, x: float, y: float, z: float) -> float:
    h = h & 15
    u = x if h < 8 else y
    if h < 4:
        v = y
    elif h == 12 or h == 14:
        v = x
    else:
        v = z
    a = u if (h & 1) == 0 else -u
    b = v if (h & 2) == 0 else -v
    return a + b


@njit(cache=True)
def _gradient_noise3(perm: np.ndarray, x: float, y: float, z: float) -> float:
    """改良 Perlin ノイズ（3D）。perm は長さ 512 の置換表。"""
    xf = math.floor(x)
    yf = math.floor(y)
    zf = math.floor(z)
    xi = int(xf) & 255
    yi = int(yf) & 255
    zi = int(zf) & 255
    x -= xf
    y -= yf
    z -= zf
    u = _fade(x)
    v = _fade(y)
    w = _fade(z)

    a = perm[xi] + yi
    aa = perm[a] + zi
    ab = perm[a + 1] + zi
    b = perm[xi + 1] + yi
    ba = perm[b] + zi
    bb = perm[b + 1] + zi

    res = _lerp(
        w,
        _lerp(
            v,
            _lerp(u, _grad(perm[aa], x, y, z), _grad(perm[ba], x - 1.0, y, z)),
            _lerp(u, _grad(perm[ab], x, y - 1.0, z), _grad(perm[bb], x - 1.0, y - 1.0, z)),
        ),
        _lerp(
            v,
            _lerp(
                u,
                _grad(perm[aa + 1], x, y, z - 1.0),
                _grad(perm[ba + 1], x - 1.0, y, z - 1.0),
            ),
            _lerp(
                u,
                _grad(perm[ab + 1], x, y - 1.0, z - 1.0),
                _grad(perm[bb + 1], x - 1.0, y - 1.0, z - 1.0),
            ),
        ),
    )
    if res > 1.0:
        return 1.0
    if res < -1.0:
        return -1.0
    return res


@njit(cache=True)
def _sine_hash(ix: float, iy: float, iz: float, phase: float) -> float:
    n = math.sin(ix * 12.9898 + iy * 78.233 + iz * 37.719 + phase) * 43758.5453
    return (n - math.floor(n)) * 2.0 - 1.0


@njit(cache=True)
def _sine_value_noise3(phase: float, x: float, y: float, z: float) -> float:
    """格子点のサインハッシュを quintic fade で補間した値ノイズ（3D）。"""
    x0 = math.floor(x)
    y0 = math.floor(y)
    z0 = math.floor(z)
    u = _fade(x - x0)
    v = _fade(y - y0)
    w = _fade(z - z0)

    c000 = _sine_hash(x0, y0, z0, phase)
    c100 = _sine_hash(x0 + 1.0, y0, z0, phase)
    c010 = _sine_hash(x0, y0 + 1.0, z0, phase)
    c110 = _sine_hash(x0 + 1.0, y0 + 1.0, z0, phase)
    c001 = _sine_hash(x0, y0, z0 + 1.0, phase)
    c101 = _sine_hash(x0 + 1.0, y0, z0 + 1.0, phase)
    c011 = _sine_hash(x0, y0 + 1.0, z0 + 1.0, phase)
    c111 = _sine_hash(x0 + 1.0, y0 + 1.0, z0 + 1.0, phase)

    near = _lerp(v, _lerp(u, c000, c100), _lerp(u, c010, c110))
    far = _lerp(v, _lerp(u, c001, c101), _lerp(u, c011, c111))
    res = _lerp(w, near, far)
    if res > 1.0:
        return 1.0
    if res < -1.0:
        return -1.0
    return res


def _permutation_table(seed: Seed) -> np.ndarray:
    rng = np.random.default_rng((seed_to_int(seed), _NOISE_STREAM))
    perm = rng.permutation(256).astype(np.int64)
    table = np.concatenate([perm, perm])
    table.setflags(write=False)
    return table


@dataclass(frozen=True, slots=True)
class GradientNoise:
    """シード付き 3D 勾配ノイズ（改良 Perlin）。

    Parameters
    ----------
    perm : np.ndarray
        int64 型 shape (512,) の置換表。通常は `from_seed()` で作る。
    """

    perm: np.ndarray

    def __post_init__(self) -> None:
        perm = np.asarray(self.perm, dtype=np.int64)
        if perm.shape != (512,):
            raise FieldConfigError(f"perm は shape (512,) である必要がある: shape={perm.shape}")
        if perm.flags.writeable:
            perm = perm.copy()
            perm.setflags(write=False)
        object.__setattr__(self, "perm", perm)

    @classmethod
    def from_seed(cls, seed: Seed) -> GradientNoise:
        return cls(perm=_permutation_table(seed))

    def sample(self, x: float, y: float, t: float = 0.0) -> float:
        return float(_gradient_noise3(self.perm, float(x), float(y), float(t)))


@dataclass(frozen=True, slots=True)
class SineValueNoise:
    """サインハッシュ `frac(sin(x*12.9898 + y*78.233) * 43758.5453) * 2 - 1` による値ノイズ。

    ハッシュは整数格子点でのみ評価し、格子間は補間するので連続になる。

    Parameters
    ----------
    phase : float
        シード由来の位相（ハッシュの sin 引数へ加算）。
    """

    phase: float = 0.0

    @classmethod
    def from_seed(cls, seed: Seed) -> SineValueNoise:
        # 位相は [0, 1000) に収め、sin 引数の桁落ちを避ける。
        return cls(phase=float(seed_to_int(seed) % 1_000_003) / 1000.0)

    def sample(self, x: float, y: float, t: float = 0.0) -> float:
        return float(_sine_value_noise3(float(self.phase), float(x), float(y), float(t)))


NOISE_KINDS: tuple[str, ...] = ("gradient", "sine")


def make_noise(kind: str, seed: Seed) -> NoisePrimitive:
    """名前とシードからノイズ原始関数を作る。

    Parameters
    ----------
    kind : str
        `"gradient"` または `"sine"`。
    seed : int or str
        シード。

    Raises
    ------
    FieldConfigError
        未知の kind が指定された場合。
    """
    k = str(kind).strip().lower()
    if k == "gradient":
        return GradientNoise.from_seed(seed)
    if k == "sine":
        return SineValueNoise.from_seed(seed)
    raise FieldConfigError(f"未対応の noise kind: {kind!r}（{', '.join(NOISE_KINDS)}）")


__all__ = [
    "GradientNoise",
    "NOISE_KINDS",
    "NoisePrimitive",
    "SineValueNoise",
    "make_noise",
]
