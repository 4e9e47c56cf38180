# src/lightflow/core/geometry.py
# トレース結果のポリライン表現と、ポリライン列を (coords, offsets) にまとめる FlowLines。

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

import numpy as np

Polyline = np.ndarray
"""shape `(N, 2)` / dtype float64 の点列。挿入順が走査順。"""

GeomTuple = tuple[np.ndarray, np.ndarray]
"""`(coords, offsets)` で表すポリライン集合の最小表現。

- `coords`: shape `(N, 2)` の座標配列（float64）
- `offsets`: shape `(M+1,)` の境界配列（int32）
"""


def empty_polyline() -> Polyline:
    """点を持たない `(0, 2)` のポリラインを返す。"""
    out = np.zeros((0, 2), dtype=np.float64)
    out.setflags(write=False)
    return out


def as_polyline(points: object) -> Polyline:
    """点列を読み取り専用の `(N, 2)` float64 配列に正規化する。"""
    arr = np.array(points, dtype=np.float64)
    if arr.size == 0:
        return empty_polyline()
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValueError(f"ポリラインは shape (N,2) である必要がある: shape={arr.shape}")
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, slots=True)
class FlowLines:
    """複数ポリラインを 1 組の配列で保持する。

    Parameters
    ----------
    coords : np.ndarray
        float64 型 shape (N, 2) の頂点配列。
    offsets : np.ndarray
        int32 型 shape (M+1,) のポリライン開始インデックス配列。

    Notes
    -----
    不変性を契約とし、配列は writeable=False で保持する。
    offsets と coords の整合性はコンストラクタ内で検証する。
    """

    coords: np.ndarray
    offsets: np.ndarray

    def __post_init__(self) -> None:
        coords = np.array(self.coords, dtype=np.float64)
        offsets = np.array(self.offsets, dtype=np.int32)

        if coords.size == 0:
            coords = coords.reshape(0, 2)
        if coords.ndim != 2 or coords.shape[1] != 2:
            raise ValueError("coords は shape (N,2) の 2 次元配列である必要がある")
        if offsets.ndim != 1:
            raise ValueError("offsets は 1 次元配列である必要がある")
        if offsets.size == 0:
            raise ValueError("offsets は少なくとも 1 要素を含む必要がある")
        if offsets[0] != 0:
            raise ValueError("offsets[0] は 0 である必要がある")
        if offsets[-1] != coords.shape[0]:
            raise ValueError("offsets[-1] は coords 行数と一致する必要がある")
        if np.any(np.diff(offsets) < 0):
            raise ValueError("offsets は単調非減少である必要がある")

        coords.setflags(write=False)
        offsets.setflags(write=False)
        object.__setattr__(self, "coords", coords)
        object.__setattr__(self, "offsets", offsets)

    def __len__(self) -> int:
        return int(self.offsets.size) - 1

    def __iter__(self) -> Iterator[Polyline]:
        for i in range(len(self)):
            yield self[i]

    def __getitem__(self, index: int) -> Polyline:
        n = len(self)
        i = int(index)
        if i < 0:
            i += n
        if not (0 <= i < n):
            raise IndexError(f"ポリライン index が範囲外: {index} (n={n})")
        return self.coords[int(self.offsets[i]) : int(self.offsets[i + 1])]

    def as_tuple(self) -> GeomTuple:
        return self.coords, self.offsets


def flow_lines_from_polylines(polylines: Sequence[Polyline]) -> FlowLines:
    """ポリライン列を連結して `FlowLines` にまとめる。

    Parameters
    ----------
    polylines : Sequence[np.ndarray]
        各要素 shape (n_i, 2) の点列。順序はそのまま保持する。

    Returns
    -------
    FlowLines
        連結結果。空列なら頂点 0 / offsets `[0]`。
    """
    if not polylines:
        return FlowLines(coords=np.zeros((0, 2), dtype=np.float64), offsets=np.zeros((1,), dtype=np.int32))

    counts = np.fromiter((int(np.asarray(p).shape[0]) for p in polylines), dtype=np.int64)
    offsets = np.zeros((counts.size + 1,), dtype=np.int64)
    np.cumsum(counts, out=offsets[1:])

    # 空ポリラインは reshape で (0,2) に揃えてから連結する。
    coords = np.concatenate([np.asarray(p, dtype=np.float64).reshape(-1, 2) for p in polylines], axis=0)
    return FlowLines(coords=coords, offsets=offsets.astype(np.int32))


__all__ = [
    "FlowLines",
    "GeomTuple",
    "Polyline",
    "as_polyline",
    "empty_polyline",
    "flow_lines_from_polylines",
]
