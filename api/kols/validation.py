"""
Field rules for KOL records.

Every KOL field has one fixed rule. Rules are keyed by the field's wire
name (the JSON key and the column name), and the table below must cover
every member of `KolField`. Each rule is checked by a pydantic type; the
pydantic error is then rewritten so it names the field in double quotes
and states the violated constraint, e.g.:

    "Tel" with value "abcd1234" fails to match the required pattern: /^[0-9]+$/
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Annotated, Any, Iterable, Mapping

from pydantic import AfterValidator, AnyUrl, BeforeValidator, Field, StringConstraints, TypeAdapter, ValidationError


class KolField(str, Enum):
    """KOL record fields, in declaration order."""
    name = "Name"
    platform = "Platform"
    sex = "Sex"
    categories = "Categories"
    tel = "Tel"
    link = "Link"
    followers = "Followers"
    photo_cost = "Photo Cost / Kols"
    video_cost = "VDO Cost / Kols"
    engagement_rate = "ER%"


class RuleKind(str, Enum):
    text = "text"
    text_list = "text_list"
    number = "number"


@dataclass(frozen=True)
class FieldRule:
    kind: RuleKind
    pattern: re.Pattern[str] | None = None
    uri: bool = False


class FieldValidationError(ValueError):
    def __init__(self, field: str, reason: str) -> None:
        super().__init__(reason)
        self.field = field
        self.reason = reason


DIGITS = re.compile(r"^[0-9]+$")
DECIMAL_DIGITS = re.compile(r"^[0-9.]+$")

_URL = TypeAdapter(AnyUrl)


def _check_uri(value: str) -> str:
    # Validate only; the stored text keeps the caller's spelling.
    try:
        _URL.validate_python(value)
    except ValidationError:
        raise ValueError("must be a valid uri") from None
    return value


def _reject_bool(value: Any) -> Any:
    if isinstance(value, bool):
        raise ValueError("must be a number")
    return value


def _text(pattern: re.Pattern[str] | None = None) -> Any:
    return Annotated[
        str,
        StringConstraints(strip_whitespace=True, min_length=1, pattern=pattern.pattern if pattern else None),
    ]


Text = _text()
Digits = _text(DIGITS)
DecimalDigits = _text(DECIMAL_DIGITS)
Uri = Annotated[Text, AfterValidator(_check_uri)]
Amount = Annotated[float, BeforeValidator(_reject_bool), Field(allow_inf_nan=False)]
TextList = list[Text]


_RULES: tuple[tuple[KolField, FieldRule], ...] = (
    (KolField.name, FieldRule(RuleKind.text)),
    (KolField.platform, FieldRule(RuleKind.text)),
    (KolField.sex, FieldRule(RuleKind.text)),
    (KolField.categories, FieldRule(RuleKind.text_list)),
    (KolField.tel, FieldRule(RuleKind.text, pattern=DIGITS)),
    (KolField.link, FieldRule(RuleKind.text, uri=True)),
    (KolField.followers, FieldRule(RuleKind.text, pattern=DIGITS)),
    (KolField.photo_cost, FieldRule(RuleKind.number)),
    (KolField.video_cost, FieldRule(RuleKind.number)),
    (KolField.engagement_rate, FieldRule(RuleKind.text, pattern=DECIMAL_DIGITS)),
)

KOL_FIELD_RULES: dict[str, FieldRule] = {field.value: rule for field, rule in _RULES}

_uncovered = [f.value for f in KolField if f.value not in KOL_FIELD_RULES]
if _uncovered:
    raise RuntimeError(f"KOL fields without a validation rule: {_uncovered}")


def rule_type(rule: FieldRule) -> Any:
    """The pydantic type that enforces `rule`."""
    if rule.kind is RuleKind.number:
        return Amount
    text = _text(rule.pattern)
    if rule.uri:
        text = Annotated[text, AfterValidator(_check_uri)]
    if rule.kind is RuleKind.text_list:
        return list[text]
    return text


@lru_cache(maxsize=None)
def field_adapter(rule: FieldRule) -> TypeAdapter:
    return TypeAdapter(rule_type(rule))


_NUMBER_ERRORS = {"float_type", "float_parsing", "finite_number", "int_type", "int_parsing"}


def describe_error(label: str, error: Mapping[str, Any]) -> str:
    """Rewrite one pydantic error as a message about `label`."""
    kind = error.get("type", "")
    value = error.get("input")
    ctx = error.get("ctx") or {}

    if kind == "extra_forbidden":
        return f'"{label}" is not allowed'
    if kind == "missing" or value is None:
        return f'"{label}" is required'
    if kind == "string_type":
        return f'"{label}" must be a string'
    if kind in ("string_too_short", "string_pattern_mismatch"):
        text = str(value).strip()
        if kind == "string_too_short" or not text:
            return f'"{label}" is not allowed to be empty'
        return f'"{label}" with value "{text}" fails to match the required pattern: /{ctx.get("pattern")}/'
    if kind == "list_type":
        return f'"{label}" must be an array'
    if kind in _NUMBER_ERRORS:
        return f'"{label}" must be a number'
    if kind == "value_error" and "error" in ctx:
        return f'"{label}" {ctx["error"]}'
    return f'"{label}" {error.get("msg", "is invalid")}'


def _label(field: str, loc: Iterable[Any]) -> str:
    return field + "".join(f"[{part}]" if isinstance(part, int) else f".{part}" for part in loc)


def first_field_error(
    errors: Iterable[Mapping[str, Any]], order: Iterable[str] = KOL_FIELD_RULES
) -> FieldValidationError:
    """
    Pick the error to report from a pydantic error list.

    Each error's `loc` starts with the field name. Declared fields are
    reported in declaration order, then anything else in the order given.
    """
    rank = {name: i for i, name in enumerate(order)}
    errors = [e for e in errors if e.get("loc")]
    if not errors:
        raise ValueError("no field errors to report")

    error = min(errors, key=lambda e: rank.get(str(e["loc"][0]), len(rank)))
    field = str(error["loc"][0])
    return FieldValidationError(field, describe_error(_label(field, error["loc"][1:]), error))


def validate_field(field: str, value: Any, rules: Mapping[str, FieldRule] = KOL_FIELD_RULES) -> Any:
    """
    Check one value against its field rule and return the normalized value.

    Text comes back trimmed and numbers come back as floats. Raises
    `FieldValidationError` with a message naming the field.
    """
    rule = rules.get(field)
    if rule is None:
        raise FieldValidationError(field, f'"{field}" is not allowed')
    if value is None:
        raise FieldValidationError(field, f'"{field}" is required')

    try:
        return field_adapter(rule).validate_python(value)
    except ValidationError as exc:
        error = exc.errors()[0]
        raise FieldValidationError(field, describe_error(_label(field, error["loc"]), error)) from exc


def validate_record(payload: Mapping[str, Any], rules: Mapping[str, FieldRule] = KOL_FIELD_RULES) -> dict[str, Any]:
    """
    Check a full record. Every declared field must be present and valid,
    and no other key is allowed. The first failure in declaration order is
    reported.
    """
    record: dict[str, Any] = {}
    for field in rules:
        if field not in payload:
            raise FieldValidationError(field, f'"{field}" is required')
        record[field] = validate_field(field, payload[field], rules)

    for key in payload:
        if key not in rules:
            raise FieldValidationError(key, f'"{key}" is not allowed')
    return record
