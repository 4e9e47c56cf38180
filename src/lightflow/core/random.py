"""
どこで: `src/lightflow/core/random.py`。
何を: シード正規化と、スポーン/スタイルが使う乱数源（numpy Generator と LCG）を提供する。
なぜ: レンダーごとに乱数状態を明示的に作り直し、グローバル状態なしで再現性を保つため。
"""

from __future__ import annotations

import hashlib
import math
from typing import Protocol, Union

import numpy as np

from lightflow.core.errors import FieldConfigError

Seed = Union[int, str]
"""整数（0 以上）または文字列のシード。"""

_LCG_MULTIPLIER = 1664525
_LCG_INCREMENT = 1013904223
_LCG_MODULUS = 4294967296


class RandomSource(Protocol):
    """スポーン/スタイル計算が要求する最小の乱数インターフェース。

    `np.random.Generator` と `Lcg` の両方がこの形を満たす。
    """

    def random(self) -> float: ...

    def normal(self, loc: float = 0.0, scale: float = 1.0) -> float: ...


def seed_to_int(seed: Seed) -> int:
    """シードを 0 以上の整数へ正規化する。

    Parameters
    ----------
    seed : int or str
        整数はそのまま、文字列は SHA-256 ダイジェスト先頭 8 byte（big endian）へ写す。

    Returns
    -------
    int
        0 以上の整数シード。

    Raises
    ------
    FieldConfigError
        負の整数、bool、その他の型が渡された場合。
    """
    if isinstance(seed, bool):
        raise FieldConfigError(f"seed に bool は使えない: got={seed!r}")
    if isinstance(seed, (int, np.integer)):
        value = int(seed)
        if value < 0:
            raise FieldConfigError(f"seed は 0 以上である必要がある: got={seed!r}")
        return value
    if isinstance(seed, str):
        digest = hashlib.sha256(seed.encode("utf-8")).digest()
        return int.from_bytes(digest[:8], "big")
    raise FieldConfigError(f"seed は int または str である必要がある: got={type(seed)!r}")


RNG_KINDS: tuple[str, ...] = ("numpy", "lcg")


def make_rng(seed: Seed) -> np.random.Generator:
    """シードから新しい `np.random.Generator` を作る。

    レンダーパスの先頭で毎回呼び、乱数状態をリセットする用途。
    """
    return np.random.default_rng(seed_to_int(seed))


class Lcg:
    """線形合同法 `state = (state * 1664525 + 1013904223) mod 2**32` の乱数源。

    Parameters
    ----------
    seed : int or str
        初期状態。`seed_to_int()` の結果を 2**32 で剰余した値を使う。

    Notes
    -----
    - `random()` は `state / 2**32`（[0, 1)）を返す。
    - `normal()` は 2 回の `random()` から Box-Muller で 1 値を作る（予備値は保持しない）。
    """

    __slots__ = ("_initial", "_state")

    def __init__(self, seed: Seed) -> None:
        self._initial = seed_to_int(seed) % _LCG_MODULUS
        self._state = self._initial

    @property
    def state(self) -> int:
        return self._state

    def reset(self) -> None:
        """状態を初期シードへ戻す。"""
        self._state = self._initial

    def random(self) -> float:
        self._state = (self._state * _LCG_MULTIPLIER + _LCG_INCREMENT) % _LCG_MODULUS
        return self._state / _LCG_MODULUS

    def normal(self, loc: float = 0.0, scale: float = 1.0) -> float:
        # log(0) を避けるため u1 は (0, 1] に写す。
        u1 = 1.0 - self.random()
        u2 = self.random()
        z = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
        return float(loc) + float(scale) * z


def make_random_source(kind: str, seed: Seed) -> RandomSource:
    """`"numpy"` / `"lcg"` の乱数源を新しく作る。"""
    k = str(kind).strip().lower()
    if k == "lcg":
        return Lcg(seed)
    if k == "numpy":
        return make_rng(seed)
    raise FieldConfigError(f"未対応の rng kind: {kind!r}（{', '.join(RNG_KINDS)}）")


__all__ = ["Lcg", "RNG_KINDS", "RandomSource", "Seed", "make_random_source", "make_rng", "seed_to_int"]
