"""Main entry point for the kirum engine."""

from __future__ import annotations

import dataclasses
import logging
import random
from collections.abc import Iterable, Mapping, Sequence

from kirum.daughter import generate_daughter
from kirum.evaluator import Evaluator
from kirum.exceptions import DuplicateEntityError, UnknownReference
from kirum.global_transforms import GlobalRule
from kirum.lemma import Lemma, LemmaLike
from kirum.matching import Predicate
from kirum.models import LexiconStats, ResolvedRecord, ValidationResult
from kirum.phonetics import PhoneticGenerator, Phonology, populate_generated_words
from kirum.scripting import ScriptRunner
from kirum.store import LexisGraph
from kirum.transforms import Transform
from kirum.validator import raise_for_errors, validate_all

logger = logging.getLogger(__name__)


class Project:
    """A language family: graph, transforms, global rules and phonetics.

    Construction validates referential integrity, cycles and phonetic
    references, then fills generate-tagged leaves with generated words, so
    every later render of the same project gives the same words. Each render
    runs in its own ``Evaluator``.
    """

    def __init__(
        self,
        graph: LexisGraph,
        transforms: Mapping[str, Transform],
        global_rules: Sequence[GlobalRule] = (),
        *,
        phonology: Phonology | None = None,
        scripts: ScriptRunner | None = None,
        rng: random.Random | None = None,
        check: bool = True,
    ) -> None:
        self.graph = graph.copy()
        self.transforms: dict[str, Transform] = dict(transforms)
        self.global_rules = tuple(global_rules)
        self.phonology = phonology
        self.scripts = scripts
        self.rng = rng if rng is not None else random.Random()
        if check:
            self.check()
        if phonology is not None:
            self.graph = populate_generated_words(self.graph, self.generator())

    def __repr__(self) -> str:
        return (
            f"Project({len(self.graph)} words, {len(self.transforms)} transforms, "
            f"{len(self.global_rules)} global rules)"
        )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> list[ValidationResult]:
        """Run all validation rules and return every finding."""
        return validate_all(
            self.graph,
            self.transforms,
            global_rules=self.global_rules,
            phonology=self.phonology,
            scripts=self.scripts,
        )

    def check(self) -> None:
        """Raise the first load-time error; log warnings."""
        results = self.validate()
        for result in results:
            if result.severity == "WARNING":
                logger.warning(f"{result.rule_id} {result.entity_id}: {result.message}")
        raise_for_errors(results)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def generator(self) -> PhoneticGenerator | None:
        if self.phonology is None:
            return None
        return PhoneticGenerator(self.phonology, self.rng)

    def evaluator(self) -> Evaluator:
        """A fresh evaluation pass over the current graph."""
        return Evaluator(
            self.graph,
            self.transforms,
            self.global_rules,
            scripts=self.scripts,
            generator=self.generator(),
        )

    def render(
        self,
        *,
        language: str | None = None,
        tag: str | None = None,
        archaic: bool | None = None,
        where: Predicate | None = None,
    ) -> list[ResolvedRecord]:
        """Resolve the whole graph and return matching records."""
        evaluator = self.evaluator()
        evaluator.resolve_all()
        return evaluator.records(language=language, tag=tag, archaic=archaic, where=where)

    def words(self) -> dict[str, str]:
        """Every node's resolved word, keyed by id."""
        return {k: str(v) for k, v in self.evaluator().resolve_all().items()}

    def word(self, lexis_id: str) -> str:
        return str(self.evaluator().resolve(lexis_id))

    def stats(self, *, language: str | None = None) -> LexiconStats:
        """Counts per part of speech, language and type."""
        stats = LexiconStats()
        for lexis in self.graph.iter_lexis(language=language):
            stats.total += 1
            stats.by_pos[lexis.pos.value] = stats.by_pos.get(lexis.pos.value, 0) + 1
            lang = lexis.language or "None Set"
            stats.by_language[lang] = stats.by_language.get(lang, 0) + 1
            stats.by_type[lexis.lexis_type] = stats.by_type.get(lexis.lexis_type, 0) + 1
        return stats

    # ------------------------------------------------------------------
    # Editing and derived projects
    # ------------------------------------------------------------------

    def set_word(self, lexis_id: str, word: LemmaLike | None) -> None:
        """Change a node's literal word between renders."""
        lexis = self.graph.get(lexis_id)
        value = Lemma.of(word) or None if word is not None else None
        self.graph.replace_lexis(dataclasses.replace(lexis, word=value))

    def generate_daughter(
        self,
        source_language: str,
        new_language: str,
        transforms: Iterable[Transform | str],
        *,
        where: Predicate | None = None,
        extra_tags: Iterable[str] = (),
    ) -> Project:
        """Return a new project with a daughter of ``source_language`` added.

        ``transforms`` may mix Transform objects, which are added to the
        transform table, with names of transforms already defined.
        """
        table = dict(self.transforms)
        names: list[str] = []
        for item in transforms:
            if isinstance(item, Transform):
                existing = table.get(item.name)
                if existing is not None and existing != item:
                    raise DuplicateEntityError(
                        f"transform '{item.name}' is already defined differently"
                    )
                table[item.name] = item
                names.append(item.name)
            elif item in table:
                names.append(item)
            else:
                raise UnknownReference(item, kind="transform")

        graph, _created = generate_daughter(
            self.graph,
            source_language,
            new_language,
            names,
            where=where,
            extra_tags=extra_tags,
        )
        return Project(
            graph,
            table,
            self.global_rules,
            phonology=self.phonology,
            scripts=self.scripts,
            rng=self.rng,
        )
