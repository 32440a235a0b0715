"""Phonetic grammar engine: generate words from group/pattern rulesets.

A ruleset has ``groups`` (symbol -> alternatives) and ``lexis_types``
(generate key -> word shapes). Every alternative and shape is a pattern
string. A pattern containing whitespace is split on whitespace, otherwise
into single characters; a token with any lowercase character is a literal
phoneme and any other token names a group::

    groups:
      C: ["t", "r", "k"]
      V: ["a", "i", "u"]
      S: ["CV", "CVC"]
    lexis_types:
      root: ["S", "SS"]
"""

from __future__ import annotations

import dataclasses
import logging
import random
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from kirum.exceptions import (
    MalformedArguments,
    PhoneticRecursionLimitExceeded,
    UnknownGroupOrKey,
)
from kirum.lemma import Lemma
from kirum.store import LexisGraph

logger = logging.getLogger(__name__)

PHONETIC_RECURSION_LIMIT = 32


@dataclass(frozen=True, slots=True)
class Phoneme:
    text: str


@dataclass(frozen=True, slots=True)
class GroupRef:
    symbol: str


PatternItem = Union[Phoneme, GroupRef]
Pattern = tuple[PatternItem, ...]


def parse_pattern(raw: str) -> Pattern:
    """Parse a pattern string into phoneme literals and group references."""
    if not isinstance(raw, str):
        raise MalformedArguments(f"phonetic pattern must be a string, got {raw!r}")
    tokens = raw.split() if any(c.isspace() for c in raw) else list(raw)
    return tuple(
        Phoneme(tok) if any(c.islower() for c in tok) else GroupRef(tok)
        for tok in tokens
    )


@dataclass
class Phonology:
    """A parsed phonetic ruleset."""

    groups: dict[str, tuple[Pattern, ...]] = field(default_factory=dict)
    lexis_types: dict[str, tuple[Pattern, ...]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Phonology:
        return cls(
            groups=_parse_table(raw.get("groups") or {}, "groups"),
            lexis_types=_parse_table(raw.get("lexis_types") or {}, "lexis_types"),
        )

    def merge(self, other: Phonology) -> None:
        self.groups.update(other.groups)
        self.lexis_types.update(other.lexis_types)

    def check(self) -> None:
        """Fail if any pattern references an undeclared group."""
        for table in (self.groups, self.lexis_types):
            for patterns in table.values():
                for pattern in patterns:
                    for item in pattern:
                        if isinstance(item, GroupRef) and item.symbol not in self.groups:
                            raise UnknownGroupOrKey(item.symbol)


def _parse_table(raw: Any, name: str) -> dict[str, tuple[Pattern, ...]]:
    if not isinstance(raw, Mapping):
        raise MalformedArguments(f"phonetics '{name}' must be a mapping")
    table: dict[str, tuple[Pattern, ...]] = {}
    for key, alternatives in raw.items():
        if isinstance(alternatives, str):
            alternatives = [alternatives]
        if not isinstance(alternatives, list) or not alternatives:
            raise MalformedArguments(
                f"phonetics '{name}.{key}' must be a non-empty list of patterns"
            )
        table[str(key)] = tuple(parse_pattern(a) for a in alternatives)
    return table


class PhoneticGenerator:
    """Expands generate keys into words using an injectable random source."""

    def __init__(
        self,
        phonology: Phonology,
        rng: random.Random | None = None,
        *,
        max_depth: int = PHONETIC_RECURSION_LIMIT,
    ) -> None:
        self.phonology = phonology
        self.rng = rng if rng is not None else random.Random()
        self.max_depth = max_depth

    def create_word(self, key: str) -> Lemma:
        """Generate one word for a generate key."""
        shapes = self.phonology.lexis_types.get(key)
        if not shapes:
            raise UnknownGroupOrKey(key, kind="key")
        return self._expand(self.rng.choice(shapes))

    def _expand(self, pattern: Pattern) -> Lemma:
        # One pattern iterator per nesting level.
        letters: list[str] = []
        stack = [iter(pattern)]
        while stack:
            item = next(stack[-1], None)
            if item is None:
                stack.pop()
                continue
            if isinstance(item, Phoneme):
                letters.append(item.text)
                continue
            alternatives = self.phonology.groups.get(item.symbol)
            if not alternatives:
                raise UnknownGroupOrKey(item.symbol)
            if len(stack) > self.max_depth:
                raise PhoneticRecursionLimitExceeded(item.symbol, self.max_depth)
            stack.append(iter(self.rng.choice(alternatives)))
        return Lemma(tuple(letters))


def populate_generated_words(
    graph: LexisGraph, generator: PhoneticGenerator
) -> LexisGraph:
    """Copy of ``graph`` with a literal word on every generate-tagged leaf."""
    seeded = graph.copy()
    count = 0
    for lexis in graph:
        if not lexis.word and lexis.generate and not lexis.etymons:
            word = generator.create_word(lexis.generate)
            seeded.replace_lexis(dataclasses.replace(lexis, word=word))
            logger.debug(f"generated '{word}' for {lexis.id} ({lexis.generate})")
            count += 1
    if count:
        logger.info(f"generated {count} words from phonetic rules")
    return seeded
