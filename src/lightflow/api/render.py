"""
どこで: `src/lightflow/api/render.py`。
何を: 設定ファイルに定義されたスケッチ/ストライプ設定を名前で呼び出し、生成結果を返す。
なぜ: 描画/書き出し側がパラメータ表の組み立てを意識せずに流線列やストライプ列を受け取れるようにするため。

シードの優先順位は「引数 → エントリ固有の `seed` → `default_seed`」。
"""

from __future__ import annotations

import logging

from lightflow.core.pipeline import FlowRender, realize_flow
from lightflow.core.random import Seed
from lightflow.core.runtime_config import runtime_config, sketch_config, stripe_config
from lightflow.core.stripes import Stripe, realize_stripes

logger = logging.getLogger(__name__)


def _resolve_seed(seed: Seed | None, own_seed: Seed | None) -> Seed:
    if seed is not None:
        return seed
    if own_seed is not None:
        return own_seed
    return runtime_config().default_seed


def render_sketch(name: str, seed: Seed | None = None, *, n_worker: int = 1) -> FlowRender:
    """名前付きスケッチを 1 回レンダーする。

    Parameters
    ----------
    name : str
        `config.yaml` の `sketches` に定義された名前。
    seed : int or str or None
        None の場合はスケッチの `seed`、それも無ければ `default_seed` を使う。
    n_worker : int, default 1
        トレースの並列プロセス数。

    Returns
    -------
    FlowRender
        描画順の流線列。
    """
    sketch = sketch_config(name)
    resolved = _resolve_seed(seed, sketch.seed)
    logger.debug("render_sketch: name=%s seed=%r", name, resolved)
    return realize_flow(sketch, resolved, n_worker=n_worker)


def render_stripes(name: str, seed: Seed | None = None) -> tuple[Stripe, ...]:
    """名前付きストライプ設定からストライプ列を生成する。"""
    params = stripe_config(name)
    resolved = _resolve_seed(seed, params.seed)
    logger.debug("render_stripes: name=%s seed=%r", name, resolved)
    return realize_stripes(params, resolved)


__all__ = ["render_sketch", "render_stripes"]
