# src/lightflow/core/bounds.py
# 軸平行矩形 Rect と、キャンバス/マージンからの矩形生成。

from __future__ import annotations

import math
from dataclasses import dataclass

from lightflow.core.errors import FieldConfigError


@dataclass(frozen=True, slots=True)
class Rect:
    """軸平行の矩形領域 `[x0, x1] x [y0, y1]`。

    Parameters
    ----------
    x0, y0 : float
        左上（最小）座標。
    x1, y1 : float
        右下（最大）座標。

    Notes
    -----
    境界は両端を含む（`contains()` は辺上の点を内側とみなす）。
    幅/高さが 0 以下の矩形は `FieldConfigError`。
    """

    x0: float
    y0: float
    x1: float
    y1: float

    def __post_init__(self) -> None:
        values = (self.x0, self.y0, self.x1, self.y1)
        if not all(math.isfinite(float(v)) for v in values):
            raise FieldConfigError(f"Rect の座標は有限値である必要がある: got={values!r}")
        if float(self.x1) <= float(self.x0) or float(self.y1) <= float(self.y0):
            raise FieldConfigError(f"Rect の幅と高さは正である必要がある: got={values!r}")
        object.__setattr__(self, "x0", float(self.x0))
        object.__setattr__(self, "y0", float(self.y0))
        object.__setattr__(self, "x1", float(self.x1))
        object.__setattr__(self, "y1", float(self.y1))

    @classmethod
    def canvas(cls, width: float, height: float) -> Rect:
        """原点を左上とするキャンバス全体の矩形を返す。"""
        return cls(0.0, 0.0, float(width), float(height))

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0

    @property
    def center(self) -> tuple[float, float]:
        return ((self.x0 + self.x1) / 2.0, (self.y0 + self.y1) / 2.0)

    @property
    def half_diagonal(self) -> float:
        """中心から角までの距離。"""
        return math.hypot(self.width / 2.0, self.height / 2.0)

    def contains(self, x: float, y: float) -> bool:
        """点が矩形内（辺上を含む）にあるかを返す。"""
        return self.x0 <= x <= self.x1 and self.y0 <= y <= self.y1

    def inset(self, margin: float) -> Rect:
        """各辺を幅/高さに対する比率 `margin` だけ内側へ寄せた矩形を返す。

        Parameters
        ----------
        margin : float
            比率。`0 <= margin < 0.5` を要求する。

        Returns
        -------
        Rect
            `x0 + w*margin .. x1 - w*margin`（y も同様）の矩形。
        """
        m = float(margin)
        if not (0.0 <= m < 0.5):
            raise FieldConfigError(f"margin は 0 以上 0.5 未満である必要がある: got={margin!r}")
        dx = self.width * m
        dy = self.height * m
        return Rect(self.x0 + dx, self.y0 + dy, self.x1 - dx, self.y1 - dy)


__all__ = ["Rect"]
