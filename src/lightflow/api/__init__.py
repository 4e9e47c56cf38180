"""
どこで: `src/lightflow/api/__init__.py`。
何を: スケッチ名とシードからレンダー結果を得る公開導線を提供する。
"""

from __future__ import annotations

from lightflow.api.render import render_sketch, render_stripes

__all__ = ["render_sketch", "render_stripes"]
