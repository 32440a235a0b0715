"""Word derivation evaluator.

One ``Evaluator`` is one evaluation pass: it owns the resolved-word cache and
the in-progress set, and nothing else shares them. Descent through the
etymology graph uses an explicit frame stack, so long derivation chains do
not depend on the interpreter's recursion limit.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from kirum.exceptions import (
    CycleDetected,
    ScriptTransformFailure,
    UnderspecifiedLexis,
    UnknownGroupOrKey,
    UnknownReference,
)
from kirum.global_transforms import GlobalRule, apply_global_rules
from kirum.lemma import Lemma
from kirum.matching import Predicate, matches
from kirum.models import Etymon, Lexis, ResolvedRecord
from kirum.phonetics import PhoneticGenerator
from kirum.scripting import ScriptRunner
from kirum.store import LexisGraph
from kirum.transforms import Transform, chain_steps, run_pipeline

logger = logging.getLogger(__name__)


@dataclass
class _Frame:
    """A node whose etymons are being resolved."""

    lexis: Lexis
    links: list[Etymon]
    index: int = 0
    contributions: list[Lemma] = field(default_factory=list)
    sources: list[Lexis] = field(default_factory=list)


class Evaluator:
    """Resolves lexis words for a single evaluation pass."""

    def __init__(
        self,
        graph: LexisGraph,
        transforms: Mapping[str, Transform],
        global_rules: Sequence[GlobalRule] = (),
        *,
        scripts: ScriptRunner | None = None,
        generator: PhoneticGenerator | None = None,
    ) -> None:
        self.graph = graph
        self.transforms = transforms
        self.global_rules = tuple(global_rules)
        self.scripts = scripts
        self.generator = generator
        self._cache: dict[str, Lemma] = {}
        self._in_progress: dict[str, None] = {}

    def resolve(self, lexis_id: str) -> Lemma:
        """Return the word for ``lexis_id``, deriving its ancestors first."""
        cached = self._cache.get(lexis_id)
        if cached is not None:
            return cached

        frames: list[_Frame] = []
        try:
            word = self._enter(self.graph.get(lexis_id), frames)
            while frames:
                frame = frames[-1]
                if frame.index < len(frame.links):
                    link = frame.links[frame.index]
                    ancestor = self.graph.get(link.etymon, referrer=frame.lexis.id)
                    ancestor_word = self._enter(ancestor, frames)
                    if ancestor_word is None:
                        # ancestor pushed its own frame; revisit this link later
                        continue
                    self._absorb(frame, link, ancestor, ancestor_word)
                    frame.index += 1
                    continue
                word = self._finish(frame)
                frames.pop()
        except Exception:
            # unwound chain must not look like a cycle on the next call
            for frame in frames:
                self._in_progress.pop(frame.lexis.id, None)
            raise
        assert word is not None
        return word

    def resolve_all(self) -> dict[str, Lemma]:
        """Resolve every node in the graph."""
        for lexis in self.graph:
            self.resolve(lexis.id)
        logger.info(f"resolved {len(self._cache)} words")
        return dict(self._cache)

    def records(
        self,
        *,
        language: str | None = None,
        tag: str | None = None,
        archaic: bool | None = None,
        where: Predicate | None = None,
    ) -> list[ResolvedRecord]:
        """Resolved rows for matching nodes, sorted by word then id."""
        rows: list[ResolvedRecord] = []
        for lexis in self.graph.iter_lexis(language=language, tag=tag, archaic=archaic):
            word = self.resolve(lexis.id)
            if where is not None and not matches(where, self.view(lexis)):
                continue
            rows.append(ResolvedRecord(
                id=lexis.id,
                language=lexis.language,
                word=str(word),
                definition=lexis.definition,
                pos=lexis.pos,
                archaic=lexis.archaic,
                tags=lexis.tags,
                lexis_type=lexis.lexis_type,
            ))
        rows.sort(key=lambda r: (r.word, r.id))
        return rows

    def view(self, lexis: Lexis) -> Lexis:
        """``lexis`` carrying its resolved word, for matching and scripts."""
        return dataclasses.replace(lexis, word=self.resolve(lexis.id))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _enter(self, lexis: Lexis, frames: list[_Frame]) -> Lemma | None:
        """Return a word if one is available now, else push a frame."""
        cached = self._cache.get(lexis.id)
        if cached is not None:
            return cached
        if lexis.word:
            self._cache[lexis.id] = lexis.word
            return lexis.word
        if lexis.id in self._in_progress:
            chain = list(self._in_progress)
            raise CycleDetected(chain[chain.index(lexis.id):] + [lexis.id])
        if not lexis.etymons:
            if not lexis.generate:
                raise UnderspecifiedLexis(lexis.id)
            if self.generator is None:
                raise UnknownGroupOrKey(lexis.generate, kind="key")
            word = self.generator.create_word(lexis.generate)
            logger.debug(f"generated '{word}' for {lexis.id}")
            self._cache[lexis.id] = word
            return word

        links = lexis.ordered_etymons()
        orders = [link.agglutination_order for link in links]
        if len(set(orders)) != len(orders):
            logger.warning(
                f"{lexis.id}: etymons share an agglutination order, "
                f"using declaration order"
            )
        self._in_progress[lexis.id] = None
        frames.append(_Frame(lexis=lexis, links=links))
        return None

    def _absorb(self, frame: _Frame, link: Etymon, ancestor: Lexis, word: Lemma) -> None:
        """Run one etymon's transforms and keep its contribution."""
        source = dataclasses.replace(ancestor, word=word)
        transforms = [self._transform(name, frame.lexis.id) for name in link.transforms]
        try:
            contribution = run_pipeline(word, source, chain_steps(transforms), self.scripts)
        except ScriptTransformFailure as e:
            if e.lexis_id == frame.lexis.id:
                raise
            raise ScriptTransformFailure(frame.lexis.id, e.file, e.reason) from e
        logger.debug(
            f"{frame.lexis.id}: {ancestor.id} '{word}' -> '{contribution}' "
            f"via {list(link.transforms)}"
        )
        frame.contributions.append(contribution)
        frame.sources.append(source)

    def _finish(self, frame: _Frame) -> Lemma:
        word = Lemma()
        for contribution in frame.contributions:
            word = word + contribution
        if self.global_rules:
            current = dataclasses.replace(frame.lexis, word=word)
            word = apply_global_rules(
                word, current, frame.sources, self.global_rules, self.scripts
            )
        self._cache[frame.lexis.id] = word
        del self._in_progress[frame.lexis.id]
        return word

    def _transform(self, name: str, referrer: str) -> Transform:
        try:
            return self.transforms[name]
        except KeyError:
            raise UnknownReference(name, kind="transform", referrer=referrer) from None


def resolve_words(
    graph: LexisGraph,
    transforms: Mapping[str, Transform],
    ids: Iterable[str] | None = None,
    **kwargs,
) -> dict[str, str]:
    """Convenience: resolve ``ids`` (default: all) in a fresh pass."""
    evaluator = Evaluator(graph, transforms, **kwargs)
    targets = [lexis.id for lexis in graph] if ids is None else list(ids)
    return {lexis_id: str(evaluator.resolve(lexis_id)) for lexis_id in targets}
