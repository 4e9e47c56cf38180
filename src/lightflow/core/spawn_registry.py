# src/lightflow/core/spawn_registry.py
# スポーンパターン名から生成関数を引くレジストリ。
# `@spawn_pattern` で登録し、`spawn_registry.get(name)` で取り出す。

from __future__ import annotations

from collections.abc import ItemsView
from typing import Any, Callable, Protocol

from lightflow.core.bounds import Rect
from lightflow.core.random import RandomSource


class SpawnFunc(Protocol):
    """`(count, region, rng, **options) -> (points, rings)` を返す生成関数。

    points は長さ count 以上の (x, y) 列、rings は同じ長さの ring index 列。
    切り詰めは呼び出し側（`spawn_points()`）が行う。
    """

    def __call__(
        self,
        count: int,
        region: Rect,
        rng: RandomSource,
        **options: Any,
    ) -> tuple[list[tuple[float, float]], list[int]]: ...


class SpawnRegistry:
    """スポーンパターン名と生成関数を対応付けるレジストリ。"""

    def __init__(self) -> None:
        self._items: dict[str, SpawnFunc] = {}
        self._aliases: dict[str, str] = {}

    def _register(
        self,
        name: str,
        func: SpawnFunc,
        *,
        aliases: tuple[str, ...] = (),
        overwrite: bool = True,
    ) -> None:
        """パターンを登録する（内部用）。

        Notes
        -----
        登録は `@spawn_pattern` デコレータ経由に統一する。
        """
        if not overwrite and name in self._items:
            raise ValueError(f"spawn pattern '{name}' は既に登録されている")
        self._items[name] = func
        for alias in aliases:
            self._aliases[str(alias)] = name

    def resolve(self, name: str) -> str:
        """別名を正規名へ解決する。未登録なら KeyError。

        `str` を継承した Enum は `.value` を名前として扱う。
        """
        key = str(getattr(name, "value", name)).strip().lower()
        key = self._aliases.get(key, key)
        if key not in self._items:
            raise KeyError(key)
        return key

    def get(self, name: str) -> SpawnFunc:
        """パターン名（別名可）に対応する生成関数を取得する。

        Raises
        ------
        KeyError
            未登録の名前が指定された場合。
        """
        return self._items[self.resolve(name)]

    def __contains__(self, name: object) -> bool:
        try:
            self.resolve(name)  # type: ignore[arg-type]
        except KeyError:
            return False
        return True

    def __getitem__(self, name: str) -> SpawnFunc:
        return self.get(name)

    def items(self) -> ItemsView[str, SpawnFunc]:
        return self._items.items()

    def names(self) -> tuple[str, ...]:
        return tuple(self._items.keys())


spawn_registry = SpawnRegistry()
"""グローバルなスポーンパターンレジストリ。"""


def spawn_pattern(
    name: str,
    *,
    aliases: tuple[str, ...] = (),
    overwrite: bool = True,
) -> Callable[[SpawnFunc], SpawnFunc]:
    """グローバルレジストリ用デコレータ。

    Examples
    --------
    @spawn_pattern("grid")
    def _grid(count, region, rng):
        ...
        return points, rings
    """

    def decorator(f: SpawnFunc) -> SpawnFunc:
        spawn_registry._register(str(name), f, aliases=aliases, overwrite=overwrite)
        return f

    return decorator


__all__ = ["SpawnFunc", "SpawnRegistry", "spawn_pattern", "spawn_registry"]
