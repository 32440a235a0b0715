"""Daughter language generation.

A daughter language is a copy of every lexis in a source language, each new
node deriving from its original through one synthetic etymon link that carries
the daughter transform set. The source graph is never modified; the result is
a new graph holding both.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from kirum.matching import Predicate, matches
from kirum.models import Etymon, Lexis
from kirum.store import LexisGraph

logger = logging.getLogger(__name__)

DAUGHTER_ID_TEMPLATE = "{id}-{language}"


def slugify(text: str) -> str:
    """Lowercase, with runs of non-alphanumerics collapsed to ``-``."""
    return re.sub(r"[^0-9a-z]+", "-", text.lower()).strip("-") or "lang"


def generate_daughter(
    graph: LexisGraph,
    source_language: str,
    new_language: str,
    transforms: Iterable[str],
    *,
    where: Predicate | None = None,
    extra_tags: Iterable[str] = (),
    id_template: str = DAUGHTER_ID_TEMPLATE,
) -> tuple[LexisGraph, list[str]]:
    """Clone ``source_language`` into ``new_language``.

    Args:
        graph: Graph holding the source language (left untouched)
        source_language: Language tag of the nodes to clone
        new_language: Language tag of the new nodes
        transforms: Transform names applied on every synthetic link
        where: Optional predicate narrowing which source nodes are cloned
        extra_tags: Tags appended to every new node
        id_template: Format for new ids, with ``{id}`` and ``{language}``

    Returns:
        Tuple of (new graph, ids of the created nodes)
    """
    names = tuple(transforms)
    added_tags = tuple(extra_tags)
    daughter = graph.copy()
    slug = slugify(new_language)
    created: list[str] = []

    for lexis in graph.iter_lexis(language=source_language):
        if where is not None and not matches(where, lexis):
            logger.debug(f"daughter {new_language}: skipping {lexis.id}")
            continue
        new_id = _fresh_id(daughter, id_template.format(id=lexis.id, language=slug))
        daughter.add_lexis(Lexis(
            id=new_id,
            language=new_language,
            lexis_type=lexis.lexis_type,
            definition=lexis.definition,
            pos=lexis.pos,
            archaic=lexis.archaic,
            tags=lexis.tags + tuple(t for t in added_tags if t not in lexis.tags),
            historical_metadata=lexis.historical_metadata,
            etymons=(Etymon(etymon=lexis.id, transforms=names, agglutination_order=0),),
        ))
        created.append(new_id)

    logger.info(
        f"created daughter language {new_language} from {source_language}: "
        f"{len(created)} words"
    )
    return daughter, created


def _fresh_id(graph: LexisGraph, candidate: str) -> str:
    if candidate not in graph:
        return candidate
    n = 2
    while f"{candidate}-{n}" in graph:
        n += 1
    return f"{candidate}-{n}"
