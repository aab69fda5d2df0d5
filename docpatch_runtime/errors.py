from __future__ import annotations

from dataclasses import dataclass

INVALID_POINTER_SYNTAX = "InvalidPointerSyntax"
POINTER_NOT_FOUND = "PointerNotFound"
INVALID_PATCH_OPERATION = "InvalidPatchOperation"
TEST_FAILED = "TestFailed"


class PatchError(ValueError):
    """Base error for pointer resolution and patch application failures."""

    kind = ""

    def __init__(self, message: str, *, pointer: str = "", index: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.pointer = pointer
        self.index = index


class InvalidPointerSyntax(PatchError):
    kind = INVALID_POINTER_SYNTAX


class PointerNotFound(PatchError):
    kind = POINTER_NOT_FOUND


class InvalidPatchOperation(PatchError):
    kind = INVALID_PATCH_OPERATION


class TestFailed(PatchError):
    __test__ = False  # keep pytest from collecting the class

    kind = TEST_FAILED


@dataclass(frozen=True)
class PatchFailure:
    operation_index: int
    kind: str
    pointer: str
    message: str = ""

    @classmethod
    def from_error(cls, index: int, exc: PatchError, *, fallback_pointer: str = "") -> PatchFailure:
        return cls(
            operation_index=index,
            kind=exc.kind,
            pointer=exc.pointer or fallback_pointer,
            message=exc.message,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "operation_index": self.operation_index,
            "kind": self.kind,
            "pointer": self.pointer,
            "message": self.message,
        }

    def __str__(self) -> str:
        text = f"operation {self.operation_index} failed ({self.kind})"
        if self.message:
            text = f"{text}: {self.message}"
        return text
