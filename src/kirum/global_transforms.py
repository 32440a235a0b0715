"""Lexicon-wide transforms matched by predicate rather than graph position."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from kirum.exceptions import MalformedArguments
from kirum.lemma import Lemma
from kirum.matching import Predicate, matches, parse_predicate
from kirum.models import Lexis
from kirum.primitives import Primitive, parse_primitive
from kirum.scripting import ScriptRunner
from kirum.transforms import Step, run_pipeline

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EtymonMatch:
    """A predicate over a lexis's etymons.

    ``mode`` is ``"first"`` (the first etymon in agglutination order),
    ``"all"`` (every etymon) or ``"one"`` (at least one etymon).
    """

    predicate: Predicate
    mode: str = "first"

    def matches(self, etymons: Sequence[Lexis]) -> bool:
        if not etymons:
            return False
        if self.mode == "all":
            return all(matches(self.predicate, e) for e in etymons)
        if self.mode == "one":
            return any(matches(self.predicate, e) for e in etymons)
        return matches(self.predicate, etymons[0])


@dataclass(frozen=True, slots=True)
class GlobalRule:
    primitives: tuple[Primitive, ...]
    lexis: Predicate | None = None
    etymon: EtymonMatch | None = None
    name: str = ""

    def applies_to(self, lexis: Lexis, etymons: Sequence[Lexis]) -> bool:
        if not matches(self.lexis, lexis):
            return False
        if self.etymon is not None and not self.etymon.matches(etymons):
            return False
        return True


def parse_global_rule(raw: Any, index: int = 0) -> GlobalRule:
    """Parse ``{transforms: [...], conditional: {lexis: ..., etymon: ...}}``."""
    name = f"global #{index + 1}"
    if not isinstance(raw, Mapping):
        raise MalformedArguments("definition must be a mapping", transform=name)
    primitives_raw = raw.get("transforms")
    if not isinstance(primitives_raw, list):
        raise MalformedArguments("'transforms' must be a list", transform=name)
    conditional = raw.get("conditional") or {}
    if not isinstance(conditional, Mapping):
        raise MalformedArguments("'conditional' must be a mapping", transform=name)
    unknown = set(conditional) - {"lexis", "etymon"}
    if unknown:
        raise MalformedArguments(
            f"unknown conditional keys: {', '.join(sorted(unknown))}",
            transform=name,
        )
    try:
        primitives = tuple(parse_primitive(p) for p in primitives_raw)
        lexis = parse_predicate(conditional.get("lexis"))
        etymon = _parse_etymon_match(conditional.get("etymon"))
    except MalformedArguments as e:
        raise MalformedArguments(str(e), transform=name) from e
    return GlobalRule(primitives=primitives, lexis=lexis, etymon=etymon, name=name)


def _parse_etymon_match(raw: Any) -> EtymonMatch | None:
    if raw is None:
        return None
    if isinstance(raw, Mapping) and len(raw) == 1:
        (mode, inner), = raw.items()
        if mode in ("all", "one"):
            predicate = parse_predicate(inner)
            if predicate is None:
                raise MalformedArguments(f"etymon '{mode}' needs a conditional")
            return EtymonMatch(predicate, mode)
    return EtymonMatch(parse_predicate(raw))


def apply_global_rules(
    word: Lemma,
    lexis: Lexis,
    etymons: Sequence[Lexis],
    rules: Sequence[GlobalRule],
    scripts: ScriptRunner | None = None,
) -> Lemma:
    """Run every matching rule, in declared order, over an agglutinated word.

    ``lexis`` is matched with ``word`` as its current word; ``etymons`` are
    the resolved ancestors in agglutination order.
    """
    current = word
    for rule in rules:
        if not rule.applies_to(lexis, etymons):
            continue
        logger.debug(f"{lexis.id}: applying {rule.name or 'global rule'}")
        steps = (Step(p, None, rule.name) for p in rule.primitives)
        current = run_pipeline(current, lexis, steps, scripts)
    return current
