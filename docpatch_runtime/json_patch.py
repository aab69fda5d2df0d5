"""RFC 6902 JSON patch application (add/remove/replace/move/copy/test).

Documents are never modified in place. Each operation copies only the
containers between the root and the location it changes; untouched subtrees
are shared with the previous document.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from docpatch_runtime.errors import (
    InvalidPatchOperation,
    PatchError,
    PatchFailure,
    PointerNotFound,
    TestFailed,
)
from docpatch_runtime.json_types import deep_copy, json_equal
from docpatch_runtime.operations import (
    OP_ADD,
    OP_COPY,
    OP_MOVE,
    OP_REMOVE,
    OP_REPLACE,
    OP_TEST,
    Operation,
    coerce_operation,
)
from docpatch_runtime.pointer import Pointer


@dataclass(frozen=True)
class PatchResult:
    document: Any
    failure: PatchFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def _shallow(container: Any) -> Any:
    if isinstance(container, dict):
        return dict(container)
    if isinstance(container, list):
        return list(container)
    return container


def _copy_path(document: Any, tokens: tuple[str, ...]) -> tuple[Any, Any]:
    """Copy the containers along ``tokens``; return the new root and the copied tip.

    ``tokens`` must already be known to resolve against ``document``.
    """
    root = _shallow(document)
    current = root
    for token in tokens:
        key: str | int = int(token) if isinstance(current, list) else token
        child = _shallow(current[key])
        current[key] = child
        current = child
    return root, current


def _insert(document: Any, pointer: Pointer, value: Any) -> Any:
    if pointer.is_root:
        return value
    location = pointer.locate(document, insert=True)
    new_doc, parent = _copy_path(document, pointer.parent.tokens)
    if isinstance(parent, list):
        parent.insert(location.key, value)
    else:
        parent[location.key] = value
    return new_doc


def _delete(document: Any, pointer: Pointer) -> tuple[Any, Any]:
    if pointer.is_root:
        raise InvalidPatchOperation("cannot remove the document root", pointer=str(pointer))
    location = pointer.locate(document)
    new_doc, parent = _copy_path(document, pointer.parent.tokens)
    removed = parent[location.key]
    del parent[location.key]
    return new_doc, removed


def _op_add(document: Any, operation: Operation) -> Any:
    return _insert(document, Pointer.parse(operation.path), deep_copy(operation.value))


def _op_remove(document: Any, operation: Operation) -> Any:
    new_doc, _ = _delete(document, Pointer.parse(operation.path))
    return new_doc


def _op_replace(document: Any, operation: Operation) -> Any:
    pointer = Pointer.parse(operation.path)
    value = deep_copy(operation.value)
    if pointer.is_root:
        return value
    location = pointer.locate(document)
    new_doc, parent = _copy_path(document, pointer.parent.tokens)
    parent[location.key] = value
    return new_doc


def _op_move(document: Any, operation: Operation) -> Any:
    source = Pointer.parse(operation.source)
    target = Pointer.parse(operation.path)
    source.resolve(document)
    if source == target:
        return document
    if source.is_strict_prefix_of(target):
        raise InvalidPatchOperation(
            f"cannot move {operation.source!r} into its own descendant {operation.path!r}",
            pointer=operation.source,
        )
    intermediate, value = _delete(document, source)
    return _insert(intermediate, target, value)


def _op_copy(document: Any, operation: Operation) -> Any:
    source = Pointer.parse(operation.source)
    value = deep_copy(source.resolve(document))
    return _insert(document, Pointer.parse(operation.path), value)


def _op_test(document: Any, operation: Operation) -> Any:
    pointer = Pointer.parse(operation.path)
    try:
        actual = pointer.resolve(document)
    except PointerNotFound as exc:
        raise TestFailed(f"test target does not exist: {exc.message}", pointer=operation.path) from exc
    if not json_equal(actual, operation.value):
        raise TestFailed(f"value at {operation.path!r} does not match", pointer=operation.path)
    return document


HANDLERS: dict[str, Callable[[Any, Operation], Any]] = {
    OP_ADD: _op_add,
    OP_REMOVE: _op_remove,
    OP_REPLACE: _op_replace,
    OP_MOVE: _op_move,
    OP_COPY: _op_copy,
    OP_TEST: _op_test,
}


def apply_operation(document: Any, operation: Operation | Mapping[str, Any]) -> Any:
    """Apply a single operation, raising ``PatchError`` on failure."""
    op = coerce_operation(operation)
    return HANDLERS[op.op](document, op)


def apply(document: Any, patch_ops: Iterable[Operation | Mapping[str, Any]]) -> PatchResult:
    """Apply ``patch_ops`` in order as one all-or-nothing step.

    On failure the original ``document`` is returned together with the index
    and kind of the first operation that could not be applied.
    """
    result = document
    for idx, item in enumerate(patch_ops):
        try:
            result = apply_operation(result, item)
        except PatchError as exc:
            failure = PatchFailure.from_error(idx, exc, fallback_pointer=_fallback_pointer(item))
            return PatchResult(document=document, failure=failure)
    return PatchResult(document=result)


def apply_strict(document: Any, patch_ops: Iterable[Operation | Mapping[str, Any]]) -> Any:
    result = apply(document, patch_ops)
    if result.failure is None:
        return result.document
    failure = result.failure
    error_cls = _ERRORS_BY_KIND[failure.kind]
    raise error_cls(str(failure), pointer=failure.pointer, index=failure.operation_index)


def _fallback_pointer(item: Any) -> str:
    if isinstance(item, Operation):
        return item.path
    if isinstance(item, Mapping) and isinstance(item.get("path"), str):
        return item["path"]
    return ""


_ERRORS_BY_KIND: dict[str, type[PatchError]] = {cls.kind: cls for cls in PatchError.__subclasses__()}
