"""
どこで: `src/lightflow/core/tracer.py`。
何を: 角度場に沿って始点から一定距離ずつ進み、訪れた点列（ポリライン）を記録する。
なぜ: スポーン点ごとに独立・決定的な流線を生成し、描画側へ順序付きで渡すため。

境界の扱い
----------
- 矩形の辺上は内側とみなす（`Rect.contains()`）。
- 前進後の位置が矩形の外へ出たら、その位置は記録せずに打ち切る。
- `max_steps` 回目の記録の後の前進は観測しない（記録数が `max_steps` に達した時点で終了）。
- 始点が矩形外なら空のポリラインを返す。
"""

from __future__ import annotations

import functools
import logging
import math
import multiprocessing as mp
from collections.abc import Sequence

import numpy as np

from lightflow.core.bounds import Rect
from lightflow.core.field import AngleFunc
from lightflow.core.geometry import Polyline, as_polyline, empty_polyline
from lightflow.core.params import TraceParams

logger = logging.getLogger(__name__)

_CHUNKSIZE_DEFAULT = 16


def trace(
    start: tuple[float, float],
    bounds: Rect,
    angle_fn: AngleFunc,
    step: float,
    max_steps: int,
) -> Polyline:
    """始点から角度場に沿って流線をたどる。

    Parameters
    ----------
    start : tuple[float, float]
        始点 (x, y)。
    bounds : Rect
        打ち切り判定に使う矩形（辺上は内側）。
    angle_fn : AngleFunc
        `(x, y) -> angle [rad]`。
    step : float
        1 反復あたりの前進距離。
    max_steps : int
        記録する点の最大数。0 なら空のポリライン。

    Returns
    -------
    np.ndarray
        shape (n, 2), float64 の読み取り専用配列（`n <= max_steps`）。
    """
    x = float(start[0])
    y = float(start[1])
    n = int(max_steps)
    if n <= 0 or not bounds.contains(x, y):
        return empty_polyline()

    step_f = float(step)
    points: list[tuple[float, float]] = []
    for i in range(n):
        points.append((x, y))
        if i == n - 1:
            break
        angle = float(angle_fn(x, y))
        x += math.cos(angle) * step_f
        y += math.sin(angle) * step_f
        if not bounds.contains(x, y):
            break

    return as_polyline(points)


def trace_with(start: tuple[float, float], params: TraceParams, angle_fn: AngleFunc) -> Polyline:
    """`TraceParams` を使って `trace()` を呼ぶショートカット。"""
    return trace(start, params.bounds, angle_fn, params.step, params.max_steps)


def is_degenerate(polyline: Polyline) -> bool:
    """描画に使えない（2 点未満の）ポリラインかどうかを返す。"""
    return int(np.asarray(polyline).shape[0]) < 2


def _trace_start(start: tuple[float, float], *, params: TraceParams, angle_fn: AngleFunc) -> Polyline:
    return trace_with(start, params, angle_fn)


def trace_all(
    starts: Sequence[tuple[float, float]] | np.ndarray,
    params: TraceParams,
    angle_fn: AngleFunc,
    *,
    n_worker: int = 1,
    chunksize: int = _CHUNKSIZE_DEFAULT,
) -> list[Polyline]:
    """複数の始点をトレースし、始点と同じ順序でポリライン列を返す。

    Parameters
    ----------
    starts : Sequence[tuple[float, float]] or np.ndarray
        始点列（shape (N, 2) 相当）。
    params : TraceParams
        トレース設定。
    angle_fn : AngleFunc
        角度場。`n_worker > 1` の場合は picklable である必要がある。
    n_worker : int, default 1
        1 以下なら逐次実行。2 以上なら `"spawn"` コンテキストのプロセスプールで並列実行する。
    chunksize : int, default 16
        プールへ渡すタスク分割数。

    Returns
    -------
    list[np.ndarray]
        `starts[i]` に対応するポリラインが i 番目に入る。

    Notes
    -----
    角度場とノイズは不変オブジェクトなので、各 worker は同じ入力から同じ結果を得る。
    `Pool.map` は入力順を保つため、並列でも出力順は逐次実行と一致する。
    """
    start_list = [(float(p[0]), float(p[1])) for p in starts]
    workers = int(n_worker)
    if workers <= 1 or len(start_list) <= 1:
        return [trace_with(s, params, angle_fn) for s in start_list]

    job = functools.partial(_trace_start, params=params, angle_fn=angle_fn)
    logger.debug("trace_all: n_worker=%d n_starts=%d", workers, len(start_list))
    ctx = mp.get_context("spawn")
    with ctx.Pool(processes=workers) as pool:
        results = pool.map(job, start_list, chunksize=max(1, int(chunksize)))
    # pickle 経由で戻った配列は書き込み可能になっているので固め直す。
    return [as_polyline(p) for p in results]


__all__ = ["is_degenerate", "trace", "trace_all", "trace_with"]
