"""Narrowing helpers for untyped JSON and TOML data.

The listing API and the config file both hand us `object`. These helpers
check the shape at runtime and give the type checker something to hold on to.
"""

from __future__ import annotations

from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]
ObjList = list[object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    return obj if is_str_dict(obj) else None


def as_obj_list(obj: object) -> ObjList | None:
    return obj if isinstance(obj, list) else None


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """String value with surrounding whitespace removed; None if absent, blank or not a str."""
    value = table.get(key)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_int(table: Mapping[str, object], key: str) -> int | None:
    value = table.get(key)
    # bool is an int subclass; `per_page = true` is not a number.
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def get_float(table: Mapping[str, object], key: str) -> float | None:
    value = table.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    return as_str_dict(table.get(key))
