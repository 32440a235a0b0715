"""
Project document parser.

Reads YAML (or JSON, which YAML accepts) project documents and assembles the
lexis graph, transforms, global rules and phonetic ruleset. Derivatives are
normalized into ordinary nodes here, before any evaluation.

Example document::

    words:
      latin-cloth:
        word: burra
        language: Latin
        part_of_speech: noun
        derivatives:
          - lexis: {definition: a small cloth}
            transforms: [diminutive]
      old-french-burel:
        language: Old French
        etymology:
          etymons:
            - etymon: latin-cloth
              transforms: [latin-to-old-french]
    transforms:
      latin-to-old-french:
        transforms:
          - dedouble: {letter: r, position: first}
          - letter_replace: {letter: {old: a, new: e}, replace: last}
        conditional:
          pos: {match: {equals: noun}}
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from kirum.exceptions import DuplicateEntityError, ParseError
from kirum.global_transforms import GlobalRule, parse_global_rule
from kirum.lemma import Lemma
from kirum.models import Etymon, Lexis, PartOfSpeech
from kirum.phonetics import Phonology
from kirum.project import Project
from kirum.store import LexisGraph
from kirum.transforms import Transform, parse_transform

logger = logging.getLogger(__name__)

DERIVATIVE_ID_TEMPLATE = "{parent}-autoderive-{index}"

Source = Union[str, Path, Dict[str, Any]]


def load_document(source: Source) -> Dict[str, Any]:
    """Load a project document from a path, YAML/JSON text or a mapping.

    Raises:
        ParseError: If the content cannot be parsed
        FileNotFoundError: If the file does not exist
    """
    if isinstance(source, dict):
        return source
    if isinstance(source, Path) or _is_file_path(source):
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return _safe_load(f.read(), str(path))
    return _safe_load(source, "string")


def _is_file_path(s: str) -> bool:
    """Check if a string looks like a file path."""
    if "\n" in s:
        return False
    if "/" in s or "\\" in s:
        return True
    return s.endswith((".yaml", ".yml", ".json"))


def _safe_load(text: str, origin: str) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line = mark.line + 1 if mark else None
        raise ParseError(f"Invalid YAML in {origin}: {e}", line=line) from e
    if data is None:
        raise ParseError(f"Empty document: {origin}")
    if not isinstance(data, dict):
        raise ParseError(f"Document root must be a mapping: {origin}")
    return data


class ProjectData:
    """Parsed project content, before it is wrapped in a ``Project``."""

    def __init__(self) -> None:
        self.graph = LexisGraph()
        self.transforms: Dict[str, Transform] = {}
        self.global_rules: List[GlobalRule] = []
        self.phonology: Optional[Phonology] = None

    def add_document(self, data: Mapping[str, Any]) -> None:
        unknown = set(data) - {"words", "transforms", "globals", "phonetics"}
        if unknown:
            raise ParseError(f"Unknown top-level keys: {', '.join(sorted(unknown))}")

        transforms = data.get("transforms") or {}
        if not isinstance(transforms, Mapping):
            raise ParseError("Field 'transforms' must be a mapping")
        for name, raw in transforms.items():
            self.transforms[str(name)] = parse_transform(str(name), raw)

        rules = data.get("globals") or []
        if isinstance(rules, Mapping):
            rules = rules.get("transforms") or []
        if not isinstance(rules, list):
            raise ParseError("Field 'globals' must be a list")
        offset = len(self.global_rules)
        for i, raw in enumerate(rules):
            self.global_rules.append(parse_global_rule(raw, offset + i))

        phonetics = data.get("phonetics")
        if phonetics is not None:
            if not isinstance(phonetics, Mapping):
                raise ParseError("Field 'phonetics' must be a mapping")
            parsed = Phonology.from_dict(phonetics)
            if self.phonology is None:
                self.phonology = parsed
            else:
                self.phonology.merge(parsed)

        words = data.get("words") or {}
        if not isinstance(words, Mapping):
            raise ParseError("Field 'words' must be a mapping")
        for lexis_id, raw in words.items():
            self._add_entry(str(lexis_id), raw)

    def _add_entry(self, lexis_id: str, raw: Any) -> None:
        if not isinstance(raw, Mapping):
            raise ParseError(f"Word '{lexis_id}' must be a mapping")
        lexis = parse_lexis(lexis_id, raw)
        if lexis_id in self.graph:
            raise DuplicateEntityError(f"Key '{lexis_id}' found multiple times")
        self.graph.add_lexis(lexis)
        logger.debug(f"created node entry {lexis_id}")

        derivatives = raw.get("derivatives") or []
        if not isinstance(derivatives, list):
            raise ParseError(f"Word '{lexis_id}': 'derivatives' must be a list")
        for index, der in enumerate(derivatives):
            if not isinstance(der, Mapping):
                raise ParseError(f"Word '{lexis_id}': derivative #{index + 1} must be a mapping")
            der_id = DERIVATIVE_ID_TEMPLATE.format(parent=lexis_id, index=index)
            entry = dict(der.get("lexis") or {})
            entry["etymology"] = {"etymons": [{
                "etymon": lexis_id,
                "transforms": der.get("transforms") or [],
            }]}
            logger.debug(f"node {lexis_id} has derivative {der_id}")
            self._add_entry(der_id, entry)


def parse_lexis(lexis_id: str, raw: Mapping[str, Any]) -> Lexis:
    """Build a Lexis from one document entry."""
    word = raw.get("word")
    if word is not None and not isinstance(word, (str, list)):
        raise ParseError(f"Word '{lexis_id}': 'word' must be text or a list of letters")
    try:
        pos = PartOfSpeech.parse(raw.get("part_of_speech", raw.get("pos")))
    except ValueError as e:
        raise ParseError(f"Word '{lexis_id}': {e}") from e
    archaic = raw.get("archaic", False)
    if not isinstance(archaic, bool):
        raise ParseError(f"Word '{lexis_id}': 'archaic' must be true or false")

    return Lexis(
        id=lexis_id,
        word=Lemma.of(word) or None if word is not None else None,
        language=str(raw.get("language") or ""),
        lexis_type=str(raw.get("word_type", raw.get("type")) or ""),
        definition=str(raw.get("definition") or ""),
        pos=pos,
        archaic=archaic,
        tags=_strings(lexis_id, raw, "tags"),
        generate=raw.get("generate"),
        historical_metadata=_strings(lexis_id, raw, "historical_metadata"),
        etymons=_parse_etymons(lexis_id, raw.get("etymology")),
    )


def _strings(lexis_id: str, raw: Mapping[str, Any], key: str) -> tuple:
    value = raw.get(key) or []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise ParseError(f"Word '{lexis_id}': '{key}' must be a list")
    return tuple(str(v) for v in value)


def _parse_etymons(lexis_id: str, etymology: Any) -> tuple:
    if etymology is None:
        return ()
    if isinstance(etymology, Mapping):
        etymology = etymology.get("etymons") or []
    if not isinstance(etymology, list):
        raise ParseError(f"Word '{lexis_id}': 'etymology.etymons' must be a list")
    etymons = []
    for i, edge in enumerate(etymology):
        if not isinstance(edge, Mapping) or not edge.get("etymon"):
            raise ParseError(f"Word '{lexis_id}': etymon #{i + 1} needs an 'etymon' id")
        transforms = edge.get("transforms") or []
        if isinstance(transforms, str):
            transforms = [transforms]
        order = edge.get("agglutination_order")
        if order is not None and (isinstance(order, bool) or not isinstance(order, int)):
            raise ParseError(f"Word '{lexis_id}': agglutination_order must be an integer")
        etymons.append(Etymon(
            etymon=str(edge["etymon"]),
            transforms=tuple(str(t) for t in transforms),
            agglutination_order=order or 0,
        ))
    return tuple(etymons)


def load_projects(sources: Iterable[Source], **kwargs: Any) -> Project:
    """Load and merge several documents into one ``Project``."""
    data = ProjectData()
    for source in sources:
        data.add_document(load_document(source))
    return Project(
        data.graph,
        data.transforms,
        data.global_rules,
        phonology=data.phonology,
        **kwargs,
    )


def load_project(source: Source, **kwargs: Any) -> Project:
    """Load one document into a ``Project``.

    Args:
        source: Path to a YAML/JSON file, YAML text, or a parsed mapping
        **kwargs: Passed to ``Project`` (``scripts``, ``rng``, ...)

    Returns:
        Project, already checked for load-time errors
    """
    return load_projects([source], **kwargs)
