"""
lightflow: シード付きノイズ流れ場に沿った流線（ポリライン）の決定的な生成。

公開 API
--------
- `FieldParams` / `TraceParams` / `Rect`: 不変の設定レコード
- `make_noise` / `GradientNoise` / `SineValueNoise`: ノイズ原始関数
- `NoiseField` / `RadialBlendField` / `OutwardField` / `build_angle_field`: 角度場
- `trace` / `trace_all`: 流線トレース
- `spawn_points` / `SpawnPattern`: 始点生成
- `FlowSketch` / `realize_flow` / `render_sketch`: 1 回分のレンダー
- `lissajous`: リサージュ曲線
- `generate_stripes` / `render_stripes`: zip ストライプ列
"""

from __future__ import annotations

from lightflow.api.render import render_sketch, render_stripes
from lightflow.core.bounds import Rect
from lightflow.core.errors import FieldConfigError
from lightflow.core.field import NoiseField, OutwardField, RadialBlendField, build_angle_field
from lightflow.core.geometry import FlowLines
from lightflow.core.lissajous import lissajous
from lightflow.core.noise import GradientNoise, SineValueNoise, make_noise
from lightflow.core.params import FieldParams, TraceParams
from lightflow.core.pipeline import FlowRender, FlowSketch, StyleParams, realize_flow
from lightflow.core.random import Lcg, make_rng
from lightflow.core.spawn import SpawnPattern, SpawnSet, spawn_points
from lightflow.core.stripes import Stripe, StripeParams, generate_stripes
from lightflow.core.tracer import is_degenerate, trace, trace_all

__all__ = [
    "FieldConfigError",
    "FieldParams",
    "FlowLines",
    "FlowRender",
    "FlowSketch",
    "GradientNoise",
    "Lcg",
    "NoiseField",
    "OutwardField",
    "RadialBlendField",
    "Rect",
    "SineValueNoise",
    "SpawnPattern",
    "SpawnSet",
    "Stripe",
    "StripeParams",
    "StyleParams",
    "TraceParams",
    "build_angle_field",
    "generate_stripes",
    "is_degenerate",
    "lissajous",
    "make_noise",
    "make_rng",
    "realize_flow",
    "render_sketch",
    "render_stripes",
    "spawn_points",
    "trace",
    "trace_all",
]
