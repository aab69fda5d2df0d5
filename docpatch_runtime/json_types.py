"""Structural JSON / GeoJSON types and value helpers shared by the patch engine."""

from __future__ import annotations

import math
from typing import Any, Literal, TypedDict, Union

JSONScalar = Union[str, int, float, bool, None]
JSONValue = Union[JSONScalar, "JSONObject", "JSONArray"]
JSONObject = dict[str, JSONValue]
JSONArray = list[JSONValue]


class AddOperationDict(TypedDict):
    op: Literal["add"]
    path: str
    value: JSONValue


class RemoveOperationDict(TypedDict):
    op: Literal["remove"]
    path: str


class ReplaceOperationDict(TypedDict):
    op: Literal["replace"]
    path: str
    value: JSONValue


MoveOperationDict = TypedDict("MoveOperationDict", {"op": Literal["move"], "from": str, "path": str})
CopyOperationDict = TypedDict("CopyOperationDict", {"op": Literal["copy"], "from": str, "path": str})


class TestOperationDict(TypedDict):
    op: Literal["test"]
    path: str
    value: JSONValue


JSONPatchOperation = Union[
    AddOperationDict,
    RemoveOperationDict,
    ReplaceOperationDict,
    MoveOperationDict,
    CopyOperationDict,
    TestOperationDict,
]
JSONPatch = list[JSONPatchOperation]

# GeoJSON shapes; positions are [longitude, latitude].
Position = list[float]


class Point(TypedDict):
    type: Literal["Point"]
    coordinates: Position


class LineString(TypedDict):
    type: Literal["LineString"]
    coordinates: list[Position]


class Polygon(TypedDict):
    type: Literal["Polygon"]
    coordinates: list[list[Position]]


class MultiPoint(TypedDict):
    type: Literal["MultiPoint"]
    coordinates: list[Position]


class MultiLineString(TypedDict):
    type: Literal["MultiLineString"]
    coordinates: list[list[Position]]


class MultiPolygon(TypedDict):
    type: Literal["MultiPolygon"]
    coordinates: list[list[list[Position]]]


Geometry = Union[Point, LineString, Polygon, MultiPoint, MultiLineString, MultiPolygon]


class Feature(TypedDict):
    type: Literal["Feature"]
    geometry: Geometry
    properties: JSONObject


class FeatureCollection(TypedDict):
    type: Literal["FeatureCollection"]
    features: list[Feature]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_json_value(value: Any) -> bool:
    """Return True when ``value`` is a tree of JSON leaves, dicts and lists.

    Mapping keys must be strings and floats must be finite.
    """
    stack = [value]
    while stack:
        node = stack.pop()
        if node is None or isinstance(node, (str, bool)):
            continue
        if isinstance(node, int):
            continue
        if isinstance(node, float):
            if not math.isfinite(node):
                return False
            continue
        if isinstance(node, dict):
            if not all(isinstance(key, str) for key in node):
                return False
            stack.extend(node.values())
            continue
        if isinstance(node, list):
            stack.extend(node)
            continue
        return False
    return True


def _scalar_equal(left: Any, right: Any) -> bool:
    if _is_number(left) and _is_number(right):
        return left == right
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if left is None or right is None:
        return left is None and right is None
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    return False


def json_equal(left: Any, right: Any) -> bool:
    stack = [(left, right)]
    while stack:
        a, b = stack.pop()
        if isinstance(a, dict) and isinstance(b, dict):
            if a.keys() != b.keys():
                return False
            stack.extend((a[key], b[key]) for key in a)
        elif isinstance(a, list) and isinstance(b, list):
            if len(a) != len(b):
                return False
            stack.extend(zip(a, b))
        elif not _scalar_equal(a, b):
            return False
    return True


def _empty_like(container: dict | list) -> dict | list:
    return {} if isinstance(container, dict) else []


def deep_copy(value: Any) -> Any:
    if not isinstance(value, (dict, list)):
        return value
    root = _empty_like(value)
    stack = [(value, root)]
    while stack:
        source, target = stack.pop()
        items = source.items() if isinstance(source, dict) else enumerate(source)
        for key, item in items:
            if isinstance(item, (dict, list)):
                clone = _empty_like(item)
                stack.append((item, clone))
            else:
                clone = item
            if isinstance(target, list):
                target.append(clone)
            else:
                target[key] = clone
    return root


def document_depth(value: Any) -> int:
    """Container nesting depth; scalars are depth 0, ``{}`` and ``[]`` are depth 1."""
    depth = 0
    stack: list[tuple[Any, int]] = [(value, 0)]
    while stack:
        node, level = stack.pop()
        if isinstance(node, dict):
            children = node.values()
        elif isinstance(node, list):
            children = node
        else:
            continue
        level += 1
        depth = max(depth, level)
        stack.extend((child, level) for child in children)
    return depth
