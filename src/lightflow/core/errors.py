"""
どこで: `src/lightflow/core/errors.py`。
何を: 設定値の検証エラー `FieldConfigError` を定義する。
なぜ: 構築時の設定不正を、トレース実行時の結果（縮退ポリライン等）と区別して扱えるようにするため。
"""

from __future__ import annotations


class FieldConfigError(ValueError):
    """フィールド/トレース/スポーン設定が不正であることを表す。

    Notes
    -----
    `ValueError` のサブクラスなので、呼び出し側は `ValueError` としても捕捉できる。
    """


__all__ = ["FieldConfigError"]
