"""Transform primitive library.

Every primitive is a frozen dataclass; the set is closed and dispatched in
``apply_primitive``. Definitions are checked when parsed, so a malformed
primitive never reaches a render.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

from kirum.exceptions import MalformedArguments
from kirum.lemma import Lemma, split_letters
from kirum.models import LetterPlace, Lexis
from kirum.scripting import ScriptRunner, run_script


@dataclass(frozen=True, slots=True)
class LetterReplace:
    old: Lemma
    new: Lemma
    replace: LetterPlace


@dataclass(frozen=True, slots=True)
class LetterRemove:
    letter: Lemma
    position: LetterPlace


@dataclass(frozen=True, slots=True)
class Double:
    letter: str
    position: LetterPlace


@dataclass(frozen=True, slots=True)
class Dedouble:
    letter: str
    position: LetterPlace


@dataclass(frozen=True, slots=True)
class Postfix:
    value: Lemma


@dataclass(frozen=True, slots=True)
class Prefix:
    value: Lemma


@dataclass(frozen=True, slots=True)
class MatchReplace:
    old: Lemma
    new: Lemma


@dataclass(frozen=True, slots=True)
class LetterArray:
    letters: tuple[int | str, ...]


@dataclass(frozen=True, slots=True)
class Loanword:
    pass


@dataclass(frozen=True, slots=True)
class ScriptTransform:
    file: str


Primitive = Union[
    LetterReplace,
    LetterRemove,
    Double,
    Dedouble,
    Postfix,
    Prefix,
    MatchReplace,
    LetterArray,
    Loanword,
    ScriptTransform,
]


def apply_primitive(
    primitive: Primitive,
    word: Lemma,
    source: Lexis,
    scripts: ScriptRunner | None = None,
) -> Lemma:
    """Apply one primitive to ``word``; ``source`` is the lexis transformed from."""
    match primitive:
        case LetterReplace(old=old, new=new, replace=place):
            return word.replace(old, new, place)
        case LetterRemove(letter=letter, position=place):
            return word.remove(letter, place)
        case Double(letter=letter, position=place):
            return word.double(letter, place)
        case Dedouble(letter=letter, position=place):
            return word.dedouble(letter, place)
        case Postfix(value=value):
            return word + value
        case Prefix(value=value):
            return value + word
        case MatchReplace(old=old, new=new):
            return word.match_replace(old, new)
        case LetterArray(letters=letters):
            return word.rearrange(letters)
        case Loanword():
            return word
        case ScriptTransform(file=file):
            return Lemma.of(run_script(scripts, file, str(word), source))
    raise TypeError(f"not a transform primitive: {primitive!r}")


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_primitive(raw: Any) -> Primitive:
    """Parse ``"loanword"`` or a single-key ``{kind: args}`` mapping.

    Raises:
        MalformedArguments: if the kind is unknown or its arguments are invalid
    """
    if raw == "loanword":
        return Loanword()
    if not isinstance(raw, Mapping) or len(raw) != 1:
        raise MalformedArguments(
            f"primitive must be 'loanword' or a single-key mapping, got {raw!r}"
        )
    (kind, args), = raw.items()
    parser = _PARSERS.get(kind)
    if parser is None:
        valid = ", ".join(sorted(_PARSERS))
        raise MalformedArguments(f"unknown primitive '{kind}'. Valid: {valid}")
    if args is None:
        args = {}
    if kind not in ("loanword", "letter_array") and not isinstance(args, Mapping):
        raise MalformedArguments(f"'{kind}' arguments must be a mapping")
    return parser(args)


def _place(kind: str, args: Mapping[str, Any], key: str) -> LetterPlace:
    value = args.get(key)
    try:
        return LetterPlace(value)
    except ValueError:
        raise MalformedArguments(
            f"'{kind}': '{key}' must be one of first, last, all; got {value!r}"
        ) from None


def _text(kind: str, args: Mapping[str, Any], key: str, *, allow_empty: bool = False) -> Any:
    if key not in args:
        raise MalformedArguments(f"'{kind}': missing required field '{key}'")
    value = args[key]
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return value
    if not isinstance(value, str):
        raise MalformedArguments(f"'{kind}': field '{key}' must be text")
    if not value and not allow_empty:
        raise MalformedArguments(f"'{kind}': field '{key}' cannot be empty")
    return value


def _single_letter(kind: str, args: Mapping[str, Any], key: str) -> str:
    value = _text(kind, args, key)
    letters = tuple(value) if isinstance(value, list) else split_letters(value)
    if len(letters) != 1:
        raise MalformedArguments(f"'{kind}': field '{key}' must be one letter")
    return letters[0]


def _parse_letter_replace(args: Mapping[str, Any]) -> LetterReplace:
    letters = args.get("letter")
    if letters is not None:
        if not isinstance(letters, Mapping):
            raise MalformedArguments("'letter_replace': 'letter' must be a mapping")
        source = letters
    else:
        source = args
    return LetterReplace(
        old=Lemma.of(_text("letter_replace", source, "old")),
        new=Lemma.of(_text("letter_replace", source, "new", allow_empty=True)),
        replace=_place("letter_replace", args, "replace"),
    )


def _parse_letter_remove(args: Mapping[str, Any]) -> LetterRemove:
    return LetterRemove(
        letter=Lemma.of(_text("letter_remove", args, "letter")),
        position=_place("letter_remove", args, "position"),
    )


def _parse_double(args: Mapping[str, Any]) -> Double:
    return Double(
        letter=_single_letter("double", args, "letter"),
        position=_place("double", args, "position"),
    )


def _parse_dedouble(args: Mapping[str, Any]) -> Dedouble:
    return Dedouble(
        letter=_single_letter("dedouble", args, "letter"),
        position=_place("dedouble", args, "position"),
    )


def _parse_postfix(args: Mapping[str, Any]) -> Postfix:
    return Postfix(Lemma.of(_text("postfix", args, "value")))


def _parse_prefix(args: Mapping[str, Any]) -> Prefix:
    return Prefix(Lemma.of(_text("prefix", args, "value")))


def _parse_match_replace(args: Mapping[str, Any]) -> MatchReplace:
    return MatchReplace(
        old=Lemma.of(_text("match_replace", args, "old")),
        new=Lemma.of(_text("match_replace", args, "new", allow_empty=True)),
    )


def _parse_letter_array(args: Any) -> LetterArray:
    items = args.get("letters") if isinstance(args, Mapping) else args
    if not isinstance(items, list) or not items:
        raise MalformedArguments("'letter_array': 'letters' must be a non-empty list")
    for item in items:
        if isinstance(item, bool) or not isinstance(item, (int, str)):
            raise MalformedArguments(
                f"'letter_array': entries must be positions or letters, got {item!r}"
            )
        if isinstance(item, int) and item < 0:
            raise MalformedArguments("'letter_array': positions cannot be negative")
    return LetterArray(tuple(items))


def _parse_loanword(args: Any) -> Loanword:
    return Loanword()


def _parse_script(args: Mapping[str, Any]) -> ScriptTransform:
    file = _text("script_transform", args, "file")
    if not isinstance(file, str):
        raise MalformedArguments("'script_transform': 'file' must be a string")
    return ScriptTransform(file)


_PARSERS = {
    "letter_replace": _parse_letter_replace,
    "letter_remove": _parse_letter_remove,
    "double": _parse_double,
    "dedouble": _parse_dedouble,
    "postfix": _parse_postfix,
    "prefix": _parse_prefix,
    "match_replace": _parse_match_replace,
    "letter_array": _parse_letter_array,
    "loanword": _parse_loanword,
    "script_transform": _parse_script,
}
