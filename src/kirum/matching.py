"""Conditional predicates over lexis fields.

A conditional document is a mapping of field name to value spec::

    {"pos": {"match": {"equals": "noun"}},
     "tags": {"not": {"oneof": ["loan", "rare"]}},
     "archaic": False}

Several fields in one mapping must all match. A top-level ``not`` key negates
the mapping it wraps.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

from kirum.exceptions import MalformedArguments, UnknownField
from kirum.models import Lexis, PartOfSpeech

# Canonical field name for every accepted spelling.
FIELD_ALIASES: dict[str, str] = {
    "id": "id",
    "word": "word",
    "language": "language",
    "pos": "pos",
    "part_of_speech": "pos",
    "type": "lexis_type",
    "lexis_type": "lexis_type",
    "archaic": "archaic",
    "tags": "tags",
    "historical_metadata": "historical_metadata",
    "generate": "generate",
}

SET_FIELDS = frozenset({"tags", "historical_metadata"})

# Value an absent part of speech stringifies to.
POS_DEFAULT_SENTINEL = PartOfSpeech.NONE.value


# ---------------------------------------------------------------------------
# Predicate tree
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Equals:
    value: str | tuple[str, ...]


@dataclass(frozen=True, slots=True)
class OneOf:
    values: tuple[str, ...]


Comparator = Union[Equals, OneOf]


@dataclass(frozen=True, slots=True)
class FieldMatch:
    """Compare one lexis field against a literal."""

    field: str
    comparator: Comparator


@dataclass(frozen=True, slots=True)
class Not:
    inner: Predicate


@dataclass(frozen=True, slots=True)
class AllOf:
    predicates: tuple[Predicate, ...]


Predicate = Union[FieldMatch, Not, AllOf]


def matches(predicate: Predicate | None, lexis: Lexis) -> bool:
    """Evaluate a predicate tree against a lexis; ``None`` always matches."""
    if predicate is None:
        return True
    match predicate:
        case Not(inner=inner):
            return not matches(inner, lexis)
        case AllOf(predicates=predicates):
            return all(matches(p, lexis) for p in predicates)
        case FieldMatch(field=field, comparator=comparator):
            return _compare(field, comparator, lexis)
    raise TypeError(f"not a predicate: {predicate!r}")


def _field_value(field: str, lexis: Lexis) -> str | tuple[str, ...] | None:
    if field == "id":
        return lexis.id
    if field == "word":
        return str(lexis.word) if lexis.word is not None else None
    if field == "language":
        return lexis.language
    if field == "pos":
        return lexis.pos.value
    if field == "lexis_type":
        return lexis.lexis_type
    if field == "archaic":
        return "true" if lexis.archaic else "false"
    if field == "tags":
        return lexis.tags
    if field == "historical_metadata":
        return lexis.historical_metadata
    if field == "generate":
        return lexis.generate
    raise UnknownField(field)


def _compare(field: str, comparator: Comparator, lexis: Lexis) -> bool:
    value = _field_value(field, lexis)
    if field in SET_FIELDS:
        present = set(value or ())
        if isinstance(comparator, OneOf):
            return bool(present.intersection(comparator.values))
        wanted = comparator.value
        if isinstance(wanted, tuple):
            return set(wanted).issubset(present)
        return wanted in present
    if value is None:
        return False
    if isinstance(comparator, OneOf):
        return value in comparator.values
    return isinstance(comparator.value, str) and value == comparator.value


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_predicate(raw: Any) -> Predicate | None:
    """Parse a conditional document into a predicate tree.

    Raises:
        UnknownField: if a field name is not recognized
        MalformedArguments: if a value spec does not fit the schema
    """
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise MalformedArguments(
            f"conditional must be a mapping, got {type(raw).__name__}"
        )
    if not raw:
        raise MalformedArguments("conditional cannot be empty")

    predicates: list[Predicate] = []
    for key, spec in raw.items():
        if key == "not":
            inner = parse_predicate(spec)
            if inner is None:
                raise MalformedArguments("'not' needs a conditional to negate")
            predicates.append(Not(inner))
            continue
        field = FIELD_ALIASES.get(key)
        if field is None:
            raise UnknownField(str(key))
        predicates.append(_parse_field(field, spec))

    if len(predicates) == 1:
        return predicates[0]
    return AllOf(tuple(predicates))


def _parse_field(field: str, spec: Any) -> Predicate:
    if isinstance(spec, bool):
        return FieldMatch(field, Equals("true" if spec else "false"))
    if isinstance(spec, str):
        return FieldMatch(field, Equals(spec))
    if not isinstance(spec, Mapping) or len(spec) != 1:
        raise MalformedArguments(
            f"field '{field}' needs one of 'match', 'not', 'equals' or 'oneof'"
        )
    (op, arg), = spec.items()
    if op == "match":
        return FieldMatch(field, _parse_comparator(field, arg))
    if op == "not":
        return Not(FieldMatch(field, _parse_comparator(field, arg)))
    return FieldMatch(field, _parse_comparator(field, spec))


def _parse_comparator(field: str, raw: Any) -> Comparator:
    if isinstance(raw, str):
        return Equals(raw)
    if not isinstance(raw, Mapping) or len(raw) != 1:
        raise MalformedArguments(
            f"field '{field}' comparator must be {{equals: ...}} or {{oneof: [...]}}"
        )
    (op, arg), = raw.items()
    if op == "equals":
        if isinstance(arg, (list, tuple)):
            return Equals(tuple(_literal(v) for v in arg))
        if arg is None:
            return Equals(POS_DEFAULT_SENTINEL if field == "pos" else "")
        return Equals(_literal(arg))
    if op == "oneof":
        if not isinstance(arg, (list, tuple)):
            raise MalformedArguments(f"field '{field}': 'oneof' needs a list")
        return OneOf(tuple(_literal(v) for v in arg))
    raise MalformedArguments(f"field '{field}': unknown comparator '{op}'")


def _literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
