"""Named transforms and the pipeline executor."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from kirum.exceptions import MalformedArguments
from kirum.lemma import Lemma
from kirum.matching import Predicate, matches, parse_predicate
from kirum.models import Lexis
from kirum.primitives import Primitive, apply_primitive, parse_primitive
from kirum.scripting import ScriptRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Step:
    """One primitive plus the conditional that gates it."""

    primitive: Primitive
    conditional: Predicate | None = None
    label: str = ""


@dataclass(frozen=True, slots=True)
class Transform:
    """A named, ordered list of primitives with an optional conditional."""

    name: str
    primitives: tuple[Primitive, ...]
    conditional: Predicate | None = None

    def steps(self) -> Iterator[Step]:
        for primitive in self.primitives:
            yield Step(primitive, self.conditional, self.name)


def parse_transform(name: str, raw: Any) -> Transform:
    """Parse ``{transforms: [...], conditional: {...}}`` into a Transform.

    A bare list is accepted as the primitive list with no conditional.
    """
    if isinstance(raw, list):
        raw = {"transforms": raw}
    if not isinstance(raw, Mapping):
        raise MalformedArguments("definition must be a mapping", transform=name)
    primitives_raw = raw.get("transforms")
    if not isinstance(primitives_raw, list):
        raise MalformedArguments("'transforms' must be a list", transform=name)
    try:
        primitives = tuple(parse_primitive(p) for p in primitives_raw)
        conditional = parse_predicate(raw.get("conditional"))
    except MalformedArguments as e:
        if e.transform is not None:
            raise
        raise MalformedArguments(str(e), transform=name) from e
    return Transform(name=name, primitives=primitives, conditional=conditional)


def run_pipeline(
    word: Lemma,
    source: Lexis,
    steps: Iterable[Step],
    scripts: ScriptRunner | None = None,
) -> Lemma:
    """Apply steps in order to ``word``.

    Each step's conditional is tested against ``source``, the lexis the word
    is being transformed from; a false conditional skips the step and carries
    the current word forward.
    """
    current = word
    for step in steps:
        if not matches(step.conditional, source):
            logger.debug(f"{source.id}: skipped {step.label or 'step'}")
            continue
        current = apply_primitive(step.primitive, current, source, scripts)
    return current


def chain_steps(transforms: Iterable[Transform]) -> Iterator[Step]:
    for transform in transforms:
        yield from transform.steps()
