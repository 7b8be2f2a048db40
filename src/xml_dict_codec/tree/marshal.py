"""Conversion between native Python values and tree values.

A tree value is one of ``None``, ``bool``, ``float``, ``str``, ``list`` or a
``dict`` with ``str`` keys, nested arbitrarily. Numbers always come out as
``float``. Anything outside that set is rejected rather than coerced.
"""

import numbers
from collections.abc import Mapping
from typing import Any

from xml_dict_codec.shared import UnsupportedValueTypeError

TreeValue = Any


def to_tree_value(value: Any, path: str = "$") -> TreeValue:
    """Convert a native value into a fresh tree value.

    Args:
        value: Native value to convert
        path: Location of ``value`` used in error messages

    Returns:
        Tree value built from new containers

    Raises:
        UnsupportedValueTypeError: If ``value`` or anything inside it falls
            outside the tree-value set
    """
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, numbers.Real):
        try:
            return float(value)
        except (OverflowError, TypeError, ValueError) as e:
            raise UnsupportedValueTypeError(
                f"number {value!r} cannot be represented as a float",
                path=path,
                value_type=type(value).__name__,
            ) from e
    if isinstance(value, (list, tuple)):
        return [to_tree_value(item, f"{path}[{index}]") for index, item in enumerate(value)]
    if isinstance(value, Mapping):
        result = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise UnsupportedValueTypeError(
                    f"mapping key {key!r} is not a string",
                    path=path,
                    value_type=type(key).__name__,
                )
            result[key] = to_tree_value(item, f"{path}.{key}")
        return result

    raise UnsupportedValueTypeError(
        f"unsupported type {type(value).__name__}",
        path=path,
        value_type=type(value).__name__,
    )


def from_tree_value(value: TreeValue, path: str = "$") -> Any:
    """Convert a tree value into plain native containers.

    The result shares nothing with ``value``; callers can mutate it freely.
    """
    if value is None or isinstance(value, (bool, str, float)):
        return value
    if isinstance(value, list):
        return [from_tree_value(item, f"{path}[{index}]") for index, item in enumerate(value)]
    if isinstance(value, dict):
        result = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise UnsupportedValueTypeError(
                    f"mapping key {key!r} is not a string",
                    path=path,
                    value_type=type(key).__name__,
                )
            result[key] = from_tree_value(item, f"{path}.{key}")
        return result

    raise UnsupportedValueTypeError(
        f"{type(value).__name__} is not a tree value",
        path=path,
        value_type=type(value).__name__,
    )
