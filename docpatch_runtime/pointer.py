"""RFC 6901 JSON pointer parsing and resolution."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from docpatch_runtime.errors import InvalidPointerSyntax, PointerNotFound

END_TOKEN = "-"
_INDEX_RE = re.compile(r"0|[1-9][0-9]*")
_BAD_ESCAPE_RE = re.compile(r"~(?![01])")


def escape_token(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def unescape_token(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def parse_index(token: str, *, pointer: str = "") -> int:
    if not _INDEX_RE.fullmatch(token):
        raise InvalidPointerSyntax(f"invalid array index {token!r} in pointer {pointer!r}", pointer=pointer)
    return int(token)


@dataclass(frozen=True)
class Location:
    """A slot inside a container: a mapping key or a sequence index."""

    container: dict | list
    key: str | int


@dataclass(frozen=True)
class Pointer:
    tokens: tuple[str, ...] = ()

    @classmethod
    def parse(cls, text: str) -> Pointer:
        if not isinstance(text, str):
            raise InvalidPointerSyntax(f"pointer must be a string, got {type(text).__name__}")
        if text == "":
            return cls(())
        if not text.startswith("/"):
            raise InvalidPointerSyntax(f"pointer must start with '/': {text!r}", pointer=text)
        if _BAD_ESCAPE_RE.search(text):
            raise InvalidPointerSyntax(f"invalid '~' escape in pointer {text!r}", pointer=text)
        return cls(tuple(unescape_token(part) for part in text[1:].split("/")))

    def __str__(self) -> str:
        return "".join(f"/{escape_token(token)}" for token in self.tokens)

    @property
    def is_root(self) -> bool:
        return not self.tokens

    @property
    def parent(self) -> Pointer:
        if not self.tokens:
            raise ValueError("root pointer has no parent")
        return Pointer(self.tokens[:-1])

    @property
    def last(self) -> str:
        if not self.tokens:
            raise ValueError("root pointer has no last token")
        return self.tokens[-1]

    def child(self, token: str | int) -> Pointer:
        return Pointer((*self.tokens, str(token)))

    def is_strict_prefix_of(self, other: Pointer) -> bool:
        size = len(self.tokens)
        return size < len(other.tokens) and other.tokens[:size] == self.tokens

    def resolve(self, document: Any) -> Any:
        """Return the value the pointer addresses; the root resolves to ``document``."""
        return _walk(document, self.tokens, str(self))

    def locate(self, document: Any, *, insert: bool = False) -> Location:
        """Resolve the parent container and the key or index of the last token.

        With ``insert`` the last index may equal the sequence length and ``-``
        addresses the end; the mapping key does not have to exist. Without it
        the addressed member must exist.
        """
        text = str(self)
        if not self.tokens:
            raise ValueError("root pointer has no containing location")
        container = _walk(document, self.tokens[:-1], text)
        token = self.tokens[-1]
        if isinstance(container, dict):
            if not insert and token not in container:
                raise PointerNotFound(f"member {token!r} not found for pointer {text!r}", pointer=text)
            return Location(container, token)
        if isinstance(container, list):
            size = len(container)
            if token == END_TOKEN:
                if not insert:
                    raise PointerNotFound(f"'-' does not address an existing element: {text!r}", pointer=text)
                return Location(container, size)
            index = parse_index(token, pointer=text)
            limit = size if insert else size - 1
            if index > limit:
                raise PointerNotFound(
                    f"index {index} out of range for array of length {size} at {text!r}",
                    pointer=text,
                )
            return Location(container, index)
        raise PointerNotFound(f"cannot address into a {_kind(container)} at {text!r}", pointer=text)


def _kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return type(value).__name__


def _walk(document: Any, tokens: tuple[str, ...], pointer: str) -> Any:
    current = document
    for token in tokens:
        if isinstance(current, dict):
            if token not in current:
                raise PointerNotFound(f"member {token!r} not found for pointer {pointer!r}", pointer=pointer)
            current = current[token]
        elif isinstance(current, list):
            if token == END_TOKEN:
                raise PointerNotFound(f"'-' does not address an existing element: {pointer!r}", pointer=pointer)
            index = parse_index(token, pointer=pointer)
            if index >= len(current):
                raise PointerNotFound(
                    f"index {index} out of range for array of length {len(current)} at {pointer!r}",
                    pointer=pointer,
                )
            current = current[index]
        else:
            raise PointerNotFound(f"cannot address into a {_kind(current)} at {pointer!r}", pointer=pointer)
    return current


def resolve(document: Any, pointer: str) -> Any:
    return Pointer.parse(pointer).resolve(document)
