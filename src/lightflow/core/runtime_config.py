# どこで: `src/lightflow/core/runtime_config.py`。
# 何を: config.yaml による実行時設定（スケッチのパラメータ表・既定シード）の探索・ロード・キャッシュを提供する。
# なぜ: スクリプト内のパラメータ表を、同梱デフォルトとユーザー設定から組み立てる不変オブジェクトに置き換えるため。

"""実行時設定（`config.yaml`）の探索・ロード・キャッシュを担当する。

このモジュールは、以下を提供する:

- `config.yaml` を「同梱デフォルト → ユーザー設定（任意）」の順に適用して `RuntimeConfig` を構築
- 探索パス（CWD / HOME）と、明示指定（`set_config_path()`）の両方に対応
- 1 回ロードした結果をプロセス内でキャッシュ（設定を切り替える場合は `set_config_path()` で破棄）

入出力 / 副作用
----------------
- 入力: 同梱 `lightflow/resource/default_config.yaml`、任意でユーザーの `config.yaml`
- 出力: `RuntimeConfig`（不変データ）
- 副作用: ファイル読み取り、YAML パース、モジュールグローバルへのキャッシュ保存

実装メモ
--------
- ユーザー設定の適用はトップレベルの浅い上書き。ただし `sketches` と `stripes` は名前単位で置換する
  （既存エントリの一部キーだけを書き換えることはできない）。
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Mapping

import yaml  # type: ignore[import-untyped]

from lightflow.core.params import FieldParams
from lightflow.core.pipeline import FlowSketch, StyleParams
from lightflow.core.random import Seed
from lightflow.core.stripes import StripeParams

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """lightflow の実行時設定。

    Attributes
    ----------
    config_path:
        実際に採用されたユーザー設定ファイルのパス。ユーザー設定が無い場合は None。
    default_seed:
        シード省略時に使うシード。
    sketches:
        スケッチ名 → `FlowSketch`。
    stripes:
        ストライプ設定名 → `StripeParams`。
    """

    config_path: Path | None
    default_seed: Seed
    sketches: Mapping[str, FlowSketch]
    stripes: Mapping[str, StripeParams]


# `set_config_path()` で指定される「明示 config」のパス。
_EXPLICIT_CONFIG_PATH: Path | None = None
# `runtime_config()` のプロセス内キャッシュ。設定を切り替える場合は破棄する。
_CONFIG_CACHE: RuntimeConfig | None = None


def set_config_path(path: str | Path | None) -> None:
    """以降の設定探索で使う明示 config パスを設定する。

    Parameters
    ----------
    path:
        `config.yaml` のパス。None の場合は明示指定を解除する。

    Notes
    -----
    設定が変わるため、`runtime_config()` のキャッシュを破棄する。
    """

    global _EXPLICIT_CONFIG_PATH, _CONFIG_CACHE
    _EXPLICIT_CONFIG_PATH = None if path is None else Path(str(path)).expanduser()
    _CONFIG_CACHE = None


def _default_config_candidates() -> tuple[Path, ...]:
    """既定の `config.yaml` 探索候補を返す。

    探索順（先勝ち）:
    - `./.lightflow/config.yaml`
    - `~/.config/lightflow/config.yaml`
    """

    return (
        Path.cwd() / ".lightflow" / "config.yaml",
        Path.home() / ".config" / "lightflow" / "config.yaml",
    )


def _as_mapping(value: Any, *, key: str) -> dict[str, Any]:
    """任意値を mapping として解釈し、dict に正規化して返す。"""

    if value is None:
        return {}
    if isinstance(value, dict):
        return dict(value)
    raise RuntimeError(f"{key} は mapping である必要があります: got={value!r}")


def _as_float(value: Any, *, key: str) -> float | None:
    """任意値を float として解釈して返す。"""

    if value is None:
        return None
    if isinstance(value, bool):
        raise RuntimeError(f"{key} は数値である必要があります: got={value!r}")
    try:
        return float(value)
    except Exception as exc:
        raise RuntimeError(f"{key} は数値である必要があります: got={value!r}") from exc


def _as_int(value: Any, *, key: str) -> int | None:
    """任意値を int として解釈して返す。"""

    if value is None:
        return None
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise RuntimeError(f"{key} は整数である必要があります: got={value!r}")
    try:
        return int(value)
    except Exception as exc:
        raise RuntimeError(f"{key} は整数である必要があります: got={value!r}") from exc


def _as_float_pair(value: Any, *, key: str) -> tuple[float, float] | None:
    """任意値を (a, b) の float ペアとして解釈して返す。"""

    if value is None:
        return None
    try:
        seq = list(value)
    except Exception as exc:
        raise RuntimeError(f"{key} は [a, b] の配列である必要があります: got={value!r}") from exc
    if len(seq) != 2:
        raise RuntimeError(f"{key} は [a, b] の配列である必要があります: got={value!r}")
    a = _as_float(seq[0], key=key)
    b = _as_float(seq[1], key=key)
    return (float(a), float(b))  # type: ignore[arg-type]


def _as_str_list(value: Any, *, key: str) -> list[str] | None:
    if value is None:
        return None
    if isinstance(value, str):
        return [value]
    try:
        return [str(v) for v in value]
    except Exception as exc:
        raise RuntimeError(f"{key} は文字列の配列である必要があります: got={value!r}") from exc


def _as_seed(value: Any, *, key: str) -> Seed:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise RuntimeError(f"{key} は整数または文字列である必要があります: got={value!r}")
    return value


def _field_from_mapping(data: dict[str, Any], *, key: str) -> FieldParams:
    """`field:` mapping から `FieldParams` を構築する。"""

    kwargs: dict[str, Any] = {}
    for name in ("noise_scale", "lacunarity", "persistence", "radial_weight", "radial_falloff", "spiral_twist"):
        v = _as_float(data.get(name), key=f"{key}.{name}")
        if v is not None:
            kwargs[name] = v
    octaves = _as_int(data.get("octaves"), key=f"{key}.octaves")
    if octaves is not None:
        kwargs["octaves"] = octaves

    amplitude = _as_float(data.get("amplitude"), key=f"{key}.amplitude")
    amplitude_pi = _as_float(data.get("amplitude_pi"), key=f"{key}.amplitude_pi")
    if amplitude is not None and amplitude_pi is not None:
        raise RuntimeError(f"{key} に amplitude と amplitude_pi を同時に指定できません")
    if amplitude_pi is not None:
        kwargs["amplitude"] = amplitude_pi * math.pi
    elif amplitude is not None:
        kwargs["amplitude"] = amplitude

    return FieldParams(**kwargs)


def _style_from_mapping(data: dict[str, Any], *, key: str) -> StyleParams:
    """`style:` mapping から `StyleParams` を構築する。"""

    kwargs: dict[str, Any] = {}
    if data.get("mode") is not None:
        kwargs["mode"] = str(data["mode"])
    width_range = _as_float_pair(data.get("width_range"), key=f"{key}.width_range")
    if width_range is not None:
        kwargs["width_range"] = width_range
    opacity_range = _as_float_pair(data.get("opacity_range"), key=f"{key}.opacity_range")
    if opacity_range is not None:
        kwargs["opacity_range"] = opacity_range
    palette = _as_str_list(data.get("palette"), key=f"{key}.palette")
    if palette is not None:
        kwargs["palette"] = tuple(palette)
    if data.get("taper") is not None:
        if not isinstance(data["taper"], bool):
            raise RuntimeError(f"{key}.taper は bool である必要があります: got={data['taper']!r}")
        kwargs["taper"] = data["taper"]
    return StyleParams(**kwargs)


def sketch_from_mapping(data: Mapping[str, Any], *, name: str = "sketch") -> FlowSketch:
    """1 スケッチ分の mapping から `FlowSketch` を構築する。

    Parameters
    ----------
    data:
        `sketches.<name>` の中身。省略したキーは `FlowSketch` の既定値になる。
    name:
        エラーメッセージ用のスケッチ名。

    Raises
    ------
    RuntimeError
        型が不正な場合。
    FieldConfigError
        値の範囲が不正な場合（`FlowSketch` / `FieldParams` の検証）。
    """

    key = f"sketches.{name}"
    sketch = _as_mapping(dict(data), key=key)
    kwargs: dict[str, Any] = {}

    canvas_size = _as_float_pair(sketch.get("canvas_size"), key=f"{key}.canvas_size")
    if canvas_size is not None:
        kwargs["canvas_size"] = canvas_size
    margin = _as_float(sketch.get("margin"), key=f"{key}.margin")
    if margin is not None:
        kwargs["margin"] = margin
    for text_key in ("background", "noise", "rng", "composition", "draw_order"):
        if sketch.get(text_key) is not None:
            kwargs[text_key] = str(sketch[text_key])
    if sketch.get("seed") is not None:
        kwargs["seed"] = _as_seed(sketch["seed"], key=f"{key}.seed")

    kwargs["field_params"] = _field_from_mapping(
        _as_mapping(sketch.get("field"), key=f"{key}.field"),
        key=f"{key}.field",
    )

    trace = _as_mapping(sketch.get("trace"), key=f"{key}.trace")
    step = _as_float(trace.get("step"), key=f"{key}.trace.step")
    if step is not None:
        kwargs["step"] = step
    max_steps = _as_int(trace.get("max_steps"), key=f"{key}.trace.max_steps")
    if max_steps is not None:
        kwargs["max_steps"] = max_steps

    spawn = _as_mapping(sketch.get("spawn"), key=f"{key}.spawn")
    if spawn.get("pattern") is not None:
        kwargs["spawn_pattern"] = str(spawn["pattern"])
    count = _as_int(spawn.get("count"), key=f"{key}.spawn.count")
    if count is not None:
        kwargs["line_count"] = count
    kwargs["spawn_options"] = _as_mapping(spawn.get("options"), key=f"{key}.spawn.options")

    kwargs["style"] = _style_from_mapping(
        _as_mapping(sketch.get("style"), key=f"{key}.style"),
        key=f"{key}.style",
    )
    return FlowSketch(**kwargs)



def stripes_from_mapping(data: Mapping[str, Any], *, name: str = "stripes") -> StripeParams:
    """1 エントリ分の mapping から `StripeParams` を構築する（`stripes.<name>`）。"""

    key = f"stripes.{name}"
    entry = _as_mapping(dict(data), key=key)
    kwargs: dict[str, Any] = {}
    for float_key in ("zone_width", "height", "min_width", "max_width", "accent_chance"):
        v = _as_float(entry.get(float_key), key=f"{key}.{float_key}")
        if v is not None:
            kwargs[float_key] = v
    for int_key in ("stripe_count", "accent_after"):
        v = _as_int(entry.get(int_key), key=f"{key}.{int_key}")
        if v is not None:
            kwargs[int_key] = v
    for list_key in ("palette", "accents"):
        colors = _as_str_list(entry.get(list_key), key=f"{key}.{list_key}")
        if colors is not None:
            kwargs[list_key] = tuple(colors)
    for text_key in ("rng", "background"):
        if entry.get(text_key) is not None:
            kwargs[text_key] = str(entry[text_key])
    if entry.get("seed") is not None:
        kwargs["seed"] = _as_seed(entry["seed"], key=f"{key}.seed")
    return StripeParams(**kwargs)


def _load_yaml_text(text: str, *, source: str) -> dict[str, Any]:
    """YAML 本文をトップレベル mapping として読む。空の文書は `{}`。"""

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise RuntimeError(f"config.yaml を解釈できません: source={source}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RuntimeError(f"config.yaml は mapping である必要があります: source={source}")
    return dict(data)


def _load_packaged_default_config() -> dict[str, Any]:
    source = "lightflow/resource/default_config.yaml"
    blob = resources.files("lightflow").joinpath("resource", "default_config.yaml").read_text(encoding="utf-8")
    return _load_yaml_text(blob, source=source)


# 名前単位で置換するセクション。それ以外のトップレベルキーは丸ごと上書きする。
_NAMED_SECTIONS = ("sketches", "stripes")


def _apply_override(payload: dict[str, Any], override: dict[str, Any], *, source: str) -> None:
    for section in _NAMED_SECTIONS:
        merged = _as_mapping(payload.get(section), key=section)
        merged.update(_as_mapping(override.get(section), key=f"{section} ({source})"))
        payload[section] = merged
    payload.update({k: v for k, v in override.items() if k not in _NAMED_SECTIONS})
    logger.debug("config override applied: source=%s keys=%s", source, sorted(override))


def _discover_config_path() -> Path | None:
    return next((p for p in _default_config_candidates() if p.is_file()), None)


def _build_named(
    payload: dict[str, Any],
    section: str,
    build: Callable[..., Any],
) -> MappingProxyType:
    raw = _as_mapping(payload.get(section), key=section)
    return MappingProxyType(
        {str(name): build(_as_mapping(data, key=f"{section}.{name}"), name=str(name)) for name, data in raw.items()}
    )


def runtime_config() -> RuntimeConfig:
    """実行時設定をロードして返す（キャッシュ）。

    適用順（後勝ち）は、同梱 `default_config.yaml`、探索で最初に見つかった `config.yaml`
    （CWD → HOME）、`set_config_path()` の明示ファイル。

    Raises
    ------
    FileNotFoundError
        明示ファイルが存在しない場合。
    RuntimeError
        YAML の構文/型/version が不正な場合。
    FieldConfigError
        パラメータ値の範囲が不正な場合。
    """

    global _CONFIG_CACHE
    if _CONFIG_CACHE is not None:
        return _CONFIG_CACHE

    explicit_path = _EXPLICIT_CONFIG_PATH
    if explicit_path is not None and not explicit_path.is_file():
        raise FileNotFoundError(f"config.yaml が見つかりません: {explicit_path}")
    discovered_path = _discover_config_path()

    payload = _load_packaged_default_config()
    for path in (discovered_path, explicit_path):
        if path is not None:
            text = path.read_text(encoding="utf-8")
            _apply_override(payload, _load_yaml_text(text, source=str(path)), source=str(path))

    version = _as_int(payload.get("version"), key="version")
    if version != 1:
        raise RuntimeError(f"未対応の config.yaml version です: got={version}")

    cfg = RuntimeConfig(
        config_path=explicit_path or discovered_path,
        default_seed=_as_seed(payload.get("default_seed"), key="default_seed"),
        sketches=_build_named(payload, "sketches", sketch_from_mapping),
        stripes=_build_named(payload, "stripes", stripes_from_mapping),
    )
    _CONFIG_CACHE = cfg
    return cfg


def available_sketches() -> tuple[str, ...]:
    """設定に定義されたスケッチ名を返す。"""

    return tuple(runtime_config().sketches.keys())


def sketch_config(name: str) -> FlowSketch:
    """名前付きスケッチの `FlowSketch` を返す。未定義なら KeyError。"""

    sketches = runtime_config().sketches
    if name not in sketches:
        raise KeyError(f"未定義のスケッチです: {name!r}（{', '.join(sketches)}）")
    return sketches[name]


def stripe_config(name: str) -> StripeParams:
    """名前付きストライプ設定を返す。未定義なら KeyError。"""

    stripes = runtime_config().stripes
    if name not in stripes:
        raise KeyError(f"未定義のストライプ設定です: {name!r}（{', '.join(stripes)}）")
    return stripes[name]


__all__ = [
    "RuntimeConfig",
    "available_sketches",
    "runtime_config",
    "set_config_path",
    "sketch_config",
    "sketch_from_mapping",
    "stripe_config",
    "stripes_from_mapping",
]
