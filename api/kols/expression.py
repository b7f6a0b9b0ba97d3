"""
Partial-update expression builder.

A sparse update such as

    {"Followers": "12000", "Photo Cost / Kols": 800}

becomes an `UpdateDirective`:

    expression: "set #Followers = :Followers, #PhotoCostKols = :PhotoCostKols"
    names:      {"#Followers": "Followers", "#PhotoCostKols": "Photo Cost / Kols"}
    values:     {":Followers": "12000", ":PhotoCostKols": 800.0}

Real field names never appear in the expression text; they are only bound
through the `#` name placeholders. The store renders the directive into its
own statement (see `KolStore.apply_update`).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from core.sanitize import sanitize_text, sanitize_value

from .validation import KOL_FIELD_RULES, FieldRule, FieldValidationError, validate_field

NAME_PREFIX = "#"
VALUE_PREFIX = ":"

_PLACEHOLDER_STRIP = re.compile(r"[ /%]")


class BuilderError(ValueError):
    pass


class EmptyUpdate(BuilderError):
    def __init__(self) -> None:
        super().__init__("No data provided for update")


class InvalidField(BuilderError):
    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"Invalid data for {field}: {reason}")
        self.field = field
        self.reason = reason


class PlaceholderCollision(BuilderError):
    def __init__(self, field: str, other: str, key: str) -> None:
        super().__init__(f'Fields "{other}" and "{field}" share the placeholder key "{key}"')
        self.field = field
        self.other = other
        self.key = key


@dataclass(frozen=True)
class UpdateDirective:
    record_id: str
    expression: str
    names: dict[str, str] = field(default_factory=dict)
    values: dict[str, Any] = field(default_factory=dict)
    assignments: tuple[tuple[str, str], ...] = ()

    @property
    def clauses(self) -> list[str]:
        return [f"{name_ph} = {value_ph}" for name_ph, value_ph in self.assignments]


def placeholder_key(field_name: str) -> str:
    """
    Drop spaces, `/` and `%` from a field name.

    "Photo Cost / Kols" -> "PhotoCostKols", "ER%" -> "ER".
    """
    return _PLACEHOLDER_STRIP.sub("", field_name)


def build_update(
    record_id: str,
    fields: Mapping[str, Any],
    *,
    rules: Mapping[str, FieldRule] = KOL_FIELD_RULES,
    sanitize: Callable[[str], str] = sanitize_text,
) -> UpdateDirective:
    """
    Build the update directive for a sparse field map.

    Fields are processed in the order given. Any invalid field aborts the
    whole build, as does a placeholder key shared by two different fields.
    """
    if not fields:
        raise EmptyUpdate()

    assignments: list[tuple[str, str]] = []
    names: dict[str, str] = {}
    values: dict[str, Any] = {}
    owners: dict[str, str] = {}

    for name, value in fields.items():
        try:
            normalized = validate_field(name, value, rules)
            # Sanitizing can empty a value; it must still pass its rule.
            cleaned = validate_field(name, sanitize_value(normalized, sanitize), rules)
        except FieldValidationError as exc:
            raise InvalidField(name, exc.reason) from exc

        key = placeholder_key(name)
        if key in owners:
            raise PlaceholderCollision(name, owners[key], key)
        owners[key] = name

        name_ph = f"{NAME_PREFIX}{key}"
        value_ph = f"{VALUE_PREFIX}{key}"
        names[name_ph] = name
        values[value_ph] = cleaned
        assignments.append((name_ph, value_ph))

    return UpdateDirective(
        record_id=record_id,
        expression="set " + ", ".join(f"{n} = {v}" for n, v in assignments),
        names=names,
        values=values,
        assignments=tuple(assignments),
    )
