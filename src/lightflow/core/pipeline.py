"""
どこで: `src/lightflow/core/pipeline.py`。
何を: 1 回のレンダー（シード → ノイズ/乱数源 → スポーン → トレース → スタイル）を実行し、描画側が消費する最終形を返す。
なぜ: パラメータ表とシードだけから、毎回同じ流線列を同じ順序で得られる入口を 1 つにまとめるため。

メインフロー
------------
1. シードから乱数源とノイズ原始関数を新しく作る（レンダーごとにリセット）。
2. マージン内側の矩形にスポーン点を生成する。
3. `draw_order="outer-first"` なら中心から遠い順に安定ソートする。
4. 全始点をトレースする（並列でも始点順に揃える）。
5. 2 点未満の流線を除き、残りに描画順で線幅/不透明度/色を割り当てる。
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from lightflow.core.bounds import Rect
from lightflow.core.errors import FieldConfigError
from lightflow.core.field import COMPOSITIONS, AngleFunc, build_angle_field
from lightflow.core.geometry import FlowLines, Polyline, flow_lines_from_polylines
from lightflow.core.noise import NOISE_KINDS, make_noise
from lightflow.core.params import FieldParams, TraceParams
from lightflow.core.random import RNG_KINDS, Seed, make_random_source, seed_to_int
from lightflow.core.spawn import SpawnSet, check_spawn_options, spawn_points
from lightflow.core.styling import (
    STYLE_MODES,
    LineStyle,
    normalized_distance,
    radial_line_style,
    taper,
    uniform_line_style,
)
from lightflow.core.tracer import is_degenerate, trace_all

logger = logging.getLogger(__name__)

DRAW_ORDERS: tuple[str, ...] = ("spawn", "outer-first")


def _as_range(name: str, value: Any) -> tuple[float, float]:
    try:
        lo, hi = value
        pair = (float(lo), float(hi))
    except Exception as exc:
        raise FieldConfigError(f"{name} は (min, max) である必要がある: got={value!r}") from exc
    if not all(math.isfinite(v) for v in pair):
        raise FieldConfigError(f"{name} は有限値である必要がある: got={value!r}")
    return pair


def _choice(name: str, value: str, choices: tuple[str, ...]) -> str:
    v = str(value).strip().lower()
    if v not in choices:
        raise FieldConfigError(f"未対応の {name}: {value!r}（{', '.join(choices)}）")
    return v


@dataclass(frozen=True, slots=True)
class StyleParams:
    """流線の描画属性の決め方。

    Attributes
    ----------
    mode : str
        `"uniform"`（一様乱数・色は巡回）または `"radial"`（中心からの距離で決める）。
    width_range, opacity_range : tuple[float, float]
        (min, max)。
    palette : tuple[str, ...]
        色（`#rrggbb` 等の文字列、解釈は描画側）。
    taper : bool
        True なら描画側は `FlowLine.segment_styles()` で線に沿って細く/薄くする。
    """

    mode: str = "uniform"
    width_range: tuple[float, float] = (0.5, 2.0)
    opacity_range: tuple[float, float] = (0.3, 0.9)
    palette: tuple[str, ...] = ("#ffffff",)
    taper: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", _choice("style mode", self.mode, STYLE_MODES))
        object.__setattr__(self, "width_range", _as_range("width_range", self.width_range))
        object.__setattr__(self, "opacity_range", _as_range("opacity_range", self.opacity_range))
        palette = tuple(str(c) for c in self.palette)
        if not palette:
            raise FieldConfigError("palette は 1 色以上である必要がある")
        object.__setattr__(self, "palette", palette)
        object.__setattr__(self, "taper", bool(self.taper))


@dataclass(frozen=True, slots=True)
class FlowSketch:
    """1 回のレンダーを決める不変のパラメータ表。

    Notes
    -----
    - トレースの打ち切り矩形とスポーン領域は、どちらも `canvas.inset(margin)`。
    - `spawn_options` は mapping でも渡せる（内部ではキー順の tuple に正規化する）。
    - `spawn_pattern` と `spawn_options` は `check_spawn_options()` で構築時に検証する。
    - `seed` はこのスケッチ固有のシード。None なら呼び出し側の既定シードを使う。
    """

    canvas_size: tuple[float, float] = (1024.0, 1024.0)
    margin: float = 0.1
    noise: str = "gradient"
    rng: str = "numpy"
    composition: str = "noise"
    field_params: FieldParams = field(default_factory=FieldParams)
    step: float = 2.0
    max_steps: int = 80
    spawn_pattern: str = "random"
    line_count: int = 800
    spawn_options: tuple[tuple[str, Any], ...] = ()
    draw_order: str = "spawn"
    style: StyleParams = field(default_factory=StyleParams)
    background: str = "#0a0a0a"
    seed: Seed | None = None

    def __post_init__(self) -> None:
        w, h = _as_range("canvas_size", self.canvas_size)
        object.__setattr__(self, "canvas_size", (w, h))
        object.__setattr__(self, "noise", _choice("noise kind", self.noise, NOISE_KINDS))
        object.__setattr__(self, "rng", _choice("rng kind", self.rng, RNG_KINDS))
        object.__setattr__(self, "composition", _choice("composition", self.composition, COMPOSITIONS))
        object.__setattr__(self, "draw_order", _choice("draw order", self.draw_order, DRAW_ORDERS))
        if isinstance(self.line_count, bool) or int(self.line_count) != self.line_count or self.line_count < 0:
            raise FieldConfigError(f"line_count は 0 以上の整数である必要がある: got={self.line_count!r}")
        object.__setattr__(self, "line_count", int(self.line_count))

        options = self.spawn_options
        if isinstance(options, Mapping):
            options = tuple(sorted((str(k), v) for k, v in options.items()))
        # YAML の配列は tuple にして不変にそろえる。
        options = tuple((str(k), tuple(v) if isinstance(v, list) else v) for k, v in options)
        object.__setattr__(self, "spawn_options", options)
        object.__setattr__(
            self,
            "spawn_pattern",
            check_spawn_options(self.spawn_pattern, self.line_count, dict(options)),
        )
        if self.seed is not None:
            seed_to_int(self.seed)

        # 矩形とトレース設定は構築時に検証しておく。
        self.trace_params  # noqa: B018

    @property
    def canvas(self) -> Rect:
        return Rect.canvas(self.canvas_size[0], self.canvas_size[1])

    @property
    def bounds(self) -> Rect:
        return self.canvas.inset(self.margin)

    @property
    def trace_params(self) -> TraceParams:
        return TraceParams(step=self.step, max_steps=self.max_steps, bounds=self.bounds)


@dataclass(frozen=True, slots=True)
class FlowLine:
    """描画順に並んだ 1 本の流線と、その描画属性。"""

    points: Polyline
    spawn_index: int
    ring: int
    distance: float
    style: LineStyle
    color: str

    def segment_styles(self) -> tuple[np.ndarray, np.ndarray]:
        """セグメントごとの (widths, opacities)。始点側ほど太く濃い。"""
        return taper(int(self.points.shape[0]), self.style.width, self.style.opacity)


@dataclass(frozen=True, slots=True)
class FlowRender:
    """`realize_flow()` の結果。

    Attributes
    ----------
    sketch : FlowSketch
        使用したパラメータ表。
    seed : int
        正規化済みシード。
    spawns : SpawnSet
        生成順（ソート前）のスポーン点。
    lines : tuple[FlowLine, ...]
        描画順の流線（縮退線は除外済み）。
    skipped : int
        除外した縮退線の本数。
    """

    sketch: FlowSketch
    seed: int
    spawns: SpawnSet
    lines: tuple[FlowLine, ...]
    skipped: int

    def geometry(self) -> FlowLines:
        """描画順の全流線を `(coords, offsets)` 形式にまとめる。"""
        return flow_lines_from_polylines([line.points for line in self.lines])


def build_sketch_field(sketch: FlowSketch, seed: Seed) -> AngleFunc:
    """シードとパラメータ表から角度場を組み立てる。"""
    noise = make_noise(sketch.noise, seed)
    return build_angle_field(sketch.composition, sketch.field_params, noise, sketch.canvas)


def realize_flow(sketch: FlowSketch, seed: Seed, *, n_worker: int = 1) -> FlowRender:
    """1 回分のレンダーを実行して流線列を返す。

    Parameters
    ----------
    sketch : FlowSketch
        パラメータ表。
    seed : int or str
        シード。同じ (sketch, seed) からは常に同じ結果が得られる。
    n_worker : int, default 1
        トレースの並列プロセス数。結果の順序と値は逐次実行と一致する。

    Returns
    -------
    FlowRender
        描画順の流線と付随情報。
    """
    seed_i = seed_to_int(seed)
    logger.debug("realize_flow: seed=%r -> %d", seed, seed_i)

    rng = make_random_source(sketch.rng, seed_i)
    angle_fn = build_sketch_field(sketch, seed_i)
    params = sketch.trace_params
    canvas = sketch.canvas

    spawns = spawn_points(
        sketch.spawn_pattern,
        sketch.line_count,
        params.bounds,
        rng,
        **dict(sketch.spawn_options),
    )
    distances = normalized_distance(spawns.points, canvas.center, canvas.half_diagonal)

    order = np.arange(len(spawns), dtype=np.int64)
    if sketch.draw_order == "outer-first":
        order = np.argsort(-distances, kind="stable")

    polylines = trace_all(spawns.points[order], params, angle_fn, n_worker=n_worker)

    style = sketch.style
    n_colors = len(style.palette)
    lines: list[FlowLine] = []
    skipped = 0
    for draw_index, (spawn_index, points) in enumerate(zip(order.tolist(), polylines)):
        if is_degenerate(points):
            skipped += 1
            continue
        nd = float(distances[spawn_index])
        if style.mode == "radial":
            line_style = radial_line_style(
                nd,
                rng,
                width_range=style.width_range,
                opacity_range=style.opacity_range,
                n_colors=n_colors,
            )
        else:
            line_style = uniform_line_style(
                draw_index,
                rng,
                width_range=style.width_range,
                opacity_range=style.opacity_range,
                n_colors=n_colors,
            )
        lines.append(
            FlowLine(
                points=points,
                spawn_index=int(spawn_index),
                ring=int(spawns.rings[spawn_index]),
                distance=nd,
                style=line_style,
                color=style.palette[line_style.color_index],
            )
        )

    if skipped:
        logger.debug("realize_flow: %d 本の縮退線を除外した", skipped)
    if len(spawns) > 0 and not lines:
        logger.warning("realize_flow: 全 %d 本の流線が縮退した（step/margin を確認）", len(spawns))

    return FlowRender(
        sketch=sketch,
        seed=seed_i,
        spawns=spawns,
        lines=tuple(lines),
        skipped=skipped,
    )


__all__ = [
    "DRAW_ORDERS",
    "FlowLine",
    "FlowRender",
    "FlowSketch",
    "RNG_KINDS",
    "StyleParams",
    "build_sketch_field",
    "make_random_source",
    "realize_flow",
]
