"""Script-transform capability.

The engine never runs a scripting language itself. The host injects a
``ScriptRunner`` and the ``script_transform`` primitive calls it with the
current word and the source lexis metadata.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from kirum.exceptions import ScriptTransformFailure
from kirum.models import Lexis, PartOfSpeech

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ScriptContext:
    """Metadata exported to a script about the lexis being transformed."""

    lexis_id: str
    pos: PartOfSpeech
    language: str
    tags: frozenset[str]
    archaic: bool
    historical_metadata: frozenset[str]

    @classmethod
    def from_lexis(cls, lexis: Lexis) -> ScriptContext:
        return cls(
            lexis_id=lexis.id,
            pos=lexis.pos,
            language=lexis.language,
            tags=frozenset(lexis.tags),
            archaic=lexis.archaic,
            historical_metadata=frozenset(lexis.historical_metadata),
        )


class ScriptRunner(Protocol):
    """Transform a word given its metadata; raise on failure."""

    def run(self, file: str, word: str, context: ScriptContext) -> str:
        ...


ScriptFunc = Callable[[str, ScriptContext], str]


class ScriptRegistry:
    """A script runner backed by Python callables keyed by file name."""

    def __init__(self, scripts: dict[str, ScriptFunc] | None = None) -> None:
        self._scripts: dict[str, ScriptFunc] = dict(scripts or {})

    def register(self, file: str, func: ScriptFunc) -> None:
        self._scripts[file] = func

    def __contains__(self, file: object) -> bool:
        return file in self._scripts

    def run(self, file: str, word: str, context: ScriptContext) -> str:
        try:
            func = self._scripts[file]
        except KeyError:
            raise LookupError(f"no script registered for '{file}'") from None
        return func(word, context)


def run_script(
    runner: ScriptRunner | None,
    file: str,
    word: str,
    lexis: Lexis,
) -> str:
    """Call the injected runner, reporting any failure with its location."""
    if runner is None:
        raise ScriptTransformFailure(lexis.id, file, "no script runner configured")
    logger.debug(f"running script {file} for {lexis.id}")
    try:
        result = runner.run(file, word, ScriptContext.from_lexis(lexis))
    except ScriptTransformFailure:
        raise
    except Exception as e:
        raise ScriptTransformFailure(lexis.id, file, str(e)) from e
    if not isinstance(result, str):
        raise ScriptTransformFailure(
            lexis.id, file, f"expected a string, got {type(result).__name__}"
        )
    return result
