from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_CONFIG_PATH = Path("config") / "docpatch.json"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "limits": {
        "max_operations": 0,  # 0 = unlimited
        "max_depth": 0,  # 0 = unlimited
    },
    "output": {
        "indent": 2,
        "ensure_ascii": False,
    },
    "apply_log": "",
}

_ENV_INT_OVERRIDES = {
    "DOCPATCH_MAX_OPERATIONS": ("limits", "max_operations"),
    "DOCPATCH_MAX_DEPTH": ("limits", "max_depth"),
    "DOCPATCH_INDENT": ("output", "indent"),
}


@dataclass(frozen=True)
class PatchSettings:
    max_operations: int = 0
    max_depth: int = 0
    indent: int = 2
    ensure_ascii: bool = False
    apply_log: Optional[Path] = None
    source: Optional[Path] = None


def _deep_merge(dst: Dict[str, Any], src: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in src.items():
        if isinstance(value, dict) and isinstance(dst.get(key), dict):
            dst[key] = _deep_merge(dict(dst[key]), value)
        else:
            dst[key] = value
    return dst


def resolve_config_path(config_path: Path | None = None, *, cwd: Path | None = None) -> Optional[Path]:
    if config_path is not None:
        return config_path
    raw = os.environ.get("DOCPATCH_CONFIG", "").strip()
    if raw:
        return Path(raw).expanduser()
    candidate = (cwd or Path.cwd()) / DEFAULT_CONFIG_PATH
    if candidate.exists():
        return candidate
    return None


def load_config(config_path: Path | None = None, *, cwd: Path | None = None) -> Dict[str, Any]:
    cfg = json.loads(json.dumps(DEFAULT_SETTINGS))
    path = resolve_config_path(config_path, cwd=cwd)
    if path is None:
        return cfg
    if not path.exists():
        print(f"[docpatch] config not found: {path}", file=sys.stderr)
        return cfg
    try:
        user_cfg = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        print(f"[docpatch] failed to read {path}: {exc}", file=sys.stderr)
        return cfg
    if not isinstance(user_cfg, dict):
        print(f"[docpatch] config must be a JSON object: {path}", file=sys.stderr)
        return cfg
    return _deep_merge(cfg, user_cfg)


def _apply_env_overrides(cfg: Dict[str, Any]) -> Dict[str, Any]:
    for env_name, (section, key) in _ENV_INT_OVERRIDES.items():
        raw = os.environ.get(env_name, "").strip()
        if not raw:
            continue
        try:
            value = int(raw)
        except ValueError:
            print(f"[docpatch] ignoring {env_name}={raw!r}: not an integer", file=sys.stderr)
            continue
        cfg.setdefault(section, {})[key] = value
    apply_log = os.environ.get("DOCPATCH_APPLY_LOG", "").strip()
    if apply_log:
        cfg["apply_log"] = apply_log
    return cfg


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return default


def load_settings(config_path: Path | None = None, *, cwd: Path | None = None) -> PatchSettings:
    cfg = _apply_env_overrides(load_config(config_path, cwd=cwd))
    limits = cfg.get("limits") if isinstance(cfg.get("limits"), dict) else {}
    output = cfg.get("output") if isinstance(cfg.get("output"), dict) else {}
    apply_log = str(cfg.get("apply_log") or "").strip()
    return PatchSettings(
        max_operations=_as_int(limits.get("max_operations"), 0),
        max_depth=_as_int(limits.get("max_depth"), 0),
        indent=_as_int(output.get("indent"), 2),
        ensure_ascii=bool(output.get("ensure_ascii", False)),
        apply_log=Path(apply_log) if apply_log else None,
        source=resolve_config_path(config_path, cwd=cwd),
    )
