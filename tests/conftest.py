"""Shared test fixtures for kirum."""

import random

import pytest

from kirum import LexisGraph, Lexis, load_project


BUREAUCRACY = {
    "words": {
        "latin-cloth": {
            "word": "burra",
            "language": "Latin",
            "part_of_speech": "noun",
            "definition": "coarse woollen cloth",
        },
        "old-french-burel": {
            "language": "Old French",
            "part_of_speech": "noun",
            "definition": "cloth-covered desk",
            "etymology": {"etymons": [
                {"etymon": "latin-cloth", "transforms": ["latin-to-old-french"]},
            ]},
        },
        "french-bureau": {
            "language": "French",
            "part_of_speech": "noun",
            "definition": "desk, office",
            "etymology": {"etymons": [
                {"etymon": "old-french-burel", "transforms": ["from-old-french"]},
            ]},
        },
        "greek-kratia": {
            "word": "kratia",
            "language": "Greek",
            "part_of_speech": "noun",
            "definition": "power, rule",
        },
        "latin-cratia": {
            "language": "Latin",
            "part_of_speech": "noun",
            "definition": "rule",
            "etymology": {"etymons": [
                {"etymon": "greek-kratia", "transforms": ["greek-to-latin"]},
            ]},
        },
        "french-cratie": {
            "language": "French",
            "part_of_speech": "noun",
            "definition": "rule by",
            "word_type": "suffix",
            "etymology": {"etymons": [
                {"etymon": "latin-cratia", "transforms": ["latin-to-french"]},
            ]},
        },
        "french-bureaucratie": {
            "language": "French",
            "part_of_speech": "noun",
            "definition": "rule by officials",
            "tags": ["compound"],
            "etymology": {"etymons": [
                {"etymon": "french-bureau", "agglutination_order": 0},
                {"etymon": "french-cratie", "agglutination_order": 1},
            ]},
        },
    },
    "transforms": {
        "latin-to-old-french": {
            "transforms": [
                {"dedouble": {"letter": "r", "position": "first"}},
                {"letter_replace": {"letter": {"old": "a", "new": "e"}, "replace": "last"}},
                {"postfix": {"value": "l"}},
            ],
            "conditional": {"pos": {"match": {"equals": "noun"}}},
        },
        "from-old-french": {
            "transforms": [
                {"letter_remove": {"letter": "l", "position": "last"}},
                {"letter_replace": {"letter": {"old": "e", "new": "eau"}, "replace": "all"}},
            ],
        },
        "greek-to-latin": {
            "transforms": [
                {"letter_replace": {"letter": {"old": "k", "new": "c"}, "replace": "first"}},
            ],
        },
        "latin-to-french": {
            "transforms": [
                {"letter_replace": {"letter": {"old": "a", "new": "e"}, "replace": "last"}},
            ],
        },
    },
}


@pytest.fixture
def bureaucracy_doc():
    """The bureaucracy project as a parsed document."""
    return BUREAUCRACY


@pytest.fixture
def bureaucracy(bureaucracy_doc):
    """A loaded bureaucracy project."""
    return load_project(bureaucracy_doc, rng=random.Random(1))


@pytest.fixture
def rng():
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def make_graph():
    """Build a LexisGraph from Lexis nodes, in the given order."""

    def _make(*nodes: Lexis) -> LexisGraph:
        graph = LexisGraph()
        for node in nodes:
            graph.add_lexis(node)
        return graph

    return _make
