from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from docpatch_runtime.errors import InvalidPatchOperation
from docpatch_runtime.json_types import is_json_value

OP_ADD = "add"
OP_REMOVE = "remove"
OP_REPLACE = "replace"
OP_MOVE = "move"
OP_COPY = "copy"
OP_TEST = "test"

SUPPORTED_OPS = (OP_ADD, OP_REMOVE, OP_REPLACE, OP_MOVE, OP_COPY, OP_TEST)
VALUE_OPS = {OP_ADD, OP_REPLACE, OP_TEST}
SOURCE_OPS = {OP_MOVE, OP_COPY}


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


@dataclass(frozen=True)
class Operation:
    op: str
    path: str
    value: Any = MISSING
    source: str | None = None

    def __post_init__(self) -> None:
        if self.op not in SUPPORTED_OPS:
            raise InvalidPatchOperation(
                f"unsupported op {self.op!r}; expected one of: {', '.join(SUPPORTED_OPS)}",
                pointer=self.path if isinstance(self.path, str) else "",
            )
        if not isinstance(self.path, str):
            raise InvalidPatchOperation(f"{self.op}: 'path' must be a string")
        if self.op in VALUE_OPS:
            if self.value is MISSING:
                raise InvalidPatchOperation(f"{self.op}: missing 'value'", pointer=self.path)
            if not is_json_value(self.value):
                raise InvalidPatchOperation(f"{self.op}: 'value' is not a JSON value", pointer=self.path)
        if self.op in SOURCE_OPS and not isinstance(self.source, str):
            raise InvalidPatchOperation(f"{self.op}: 'from' must be a string", pointer=self.path)

    @property
    def has_value(self) -> bool:
        return self.value is not MISSING

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Operation:
        """Build an operation from its RFC 6902 object; unknown members are ignored."""
        if not isinstance(payload, Mapping):
            raise InvalidPatchOperation(f"operation must be an object, got {type(payload).__name__}")
        op = payload.get("op")
        if not isinstance(op, str) or not op:
            raise InvalidPatchOperation("operation is missing 'op'")
        if "path" not in payload:
            raise InvalidPatchOperation(f"{op}: missing 'path'")
        kwargs: dict[str, Any] = {"op": op, "path": payload["path"]}
        if op in VALUE_OPS and "value" in payload:
            kwargs["value"] = payload["value"]
        if op in SOURCE_OPS:
            if "from" not in payload:
                raise InvalidPatchOperation(f"{op}: missing 'from'", pointer=str(payload["path"]))
            kwargs["source"] = payload["from"]
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"op": self.op}
        if self.source is not None:
            payload["from"] = self.source
        payload["path"] = self.path
        if self.has_value:
            payload["value"] = self.value
        return payload


def coerce_operation(item: Operation | Mapping[str, Any]) -> Operation:
    if isinstance(item, Operation):
        return item
    return Operation.from_dict(item)


def parse_patch(payload: Any) -> list[Operation]:
    """Parse a whole patch document, tagging errors with the failing index."""
    if not isinstance(payload, list):
        raise InvalidPatchOperation(f"patch must be an array of operations, got {type(payload).__name__}")
    return list(_iter_parsed(payload))


def _iter_parsed(items: Iterable[Any]) -> Iterable[Operation]:
    for idx, item in enumerate(items):
        try:
            yield coerce_operation(item)
        except InvalidPatchOperation as exc:
            exc.index = idx
            raise
