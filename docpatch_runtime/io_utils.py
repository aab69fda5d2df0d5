from __future__ import annotations

import datetime as dt
import json
import sys
from pathlib import Path
from typing import Any

from docpatch_runtime.json_types import is_json_value

STDIN_MARKER = "-"


class DocumentLoadError(ValueError):
    pass


def utc_timestamp() -> str:
    return dt.datetime.now(dt.UTC).isoformat(timespec="seconds").replace("+00:00", "Z")


def _load_yaml_fallback(text: str, label: str) -> Any:
    import yaml

    try:
        payload = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise DocumentLoadError(f"{label} is neither valid JSON nor YAML: {exc}") from exc
    if not isinstance(payload, (dict, list)):
        raise DocumentLoadError(f"{label} is not valid JSON and its YAML form is not a mapping or sequence")
    return payload


def parse_document_text(text: str, *, label: str = "document") -> Any:
    if not text.strip():
        raise DocumentLoadError(f"{label} is empty")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        payload = _load_yaml_fallback(text, label)
    if not is_json_value(payload):
        raise DocumentLoadError(f"{label} contains values that are not representable as JSON")
    return payload


def read_text(path: str | Path) -> str:
    if str(path) == STDIN_MARKER:
        return sys.stdin.read()
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise DocumentLoadError(f"cannot read {path}: {exc}") from exc


def load_document(path: str | Path) -> Any:
    label = "stdin" if str(path) == STDIN_MARKER else str(path)
    return parse_document_text(read_text(path), label=label)


def dump_document(payload: Any, *, indent: int | None = 2, ensure_ascii: bool = False) -> str:
    return json.dumps(payload, ensure_ascii=ensure_ascii, indent=indent or None) + "\n"


def write_text_atomic(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as handle:
        handle.write(text)
    tmp_path.replace(path)


def read_jsonl(path: Path) -> list[dict[str, object]]:
    items: list[dict[str, object]] = []
    if not path.exists():
        return items
    try:
        with path.open("r", encoding="utf-8") as handle:
            for line in handle:
                raw = line.strip()
                if not raw:
                    continue
                try:
                    payload = json.loads(raw)
                except json.JSONDecodeError:
                    continue
                if isinstance(payload, dict):
                    items.append(payload)
    except OSError:
        return items
    return items


def append_jsonl(path: Path, payload: dict[str, object]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as handle:
        handle.write(json.dumps(payload, ensure_ascii=False) + "\n")
