"""Tests for conditional predicates."""

import pytest

from kirum import (
    Lemma,
    Lexis,
    MalformedArguments,
    PartOfSpeech,
    UnknownField,
    matches,
    parse_predicate,
)
from kirum.matching import AllOf, Equals, FieldMatch, Not, OneOf

NOUN = Lexis(
    id="latin-cloth",
    word=Lemma.of("burra"),
    language="Latin",
    pos=PartOfSpeech.NOUN,
    tags=("textile", "common"),
    historical_metadata=("attested",),
)
VERB = Lexis(id="latin-ire", language="Latin", pos=PartOfSpeech.VERB, archaic=True)
BARE = Lexis(id="bare")


class TestParse:
    """Building predicate trees."""

    def test_match_equals(self):
        pred = parse_predicate({"pos": {"match": {"equals": "noun"}}})
        assert pred == FieldMatch("pos", Equals("noun"))

    def test_aliases(self):
        assert parse_predicate({"part_of_speech": "verb"}) == FieldMatch("pos", Equals("verb"))
        assert parse_predicate({"type": "root"}) == FieldMatch("lexis_type", Equals("root"))

    def test_field_not(self):
        pred = parse_predicate({"language": {"not": {"oneof": ["Greek", "Latin"]}}})
        assert pred == Not(FieldMatch("language", OneOf(("Greek", "Latin"))))

    def test_top_level_not(self):
        pred = parse_predicate({"not": {"archaic": True}})
        assert pred == Not(FieldMatch("archaic", Equals("true")))

    def test_several_fields(self):
        pred = parse_predicate({"pos": "noun", "language": "Latin"})
        assert isinstance(pred, AllOf)
        assert len(pred.predicates) == 2

    def test_none_is_no_conditional(self):
        assert parse_predicate(None) is None

    def test_unknown_field(self):
        with pytest.raises(UnknownField) as exc:
            parse_predicate({"color": "red"})
        assert exc.value.field == "color"

    def test_unknown_comparator(self):
        with pytest.raises(MalformedArguments, match="regex"):
            parse_predicate({"pos": {"match": {"regex": "n.*"}}})

    def test_oneof_needs_list(self):
        with pytest.raises(MalformedArguments):
            parse_predicate({"pos": {"match": {"oneof": "noun"}}})

    def test_empty_mapping(self):
        with pytest.raises(MalformedArguments):
            parse_predicate({})

    def test_not_a_mapping(self):
        with pytest.raises(MalformedArguments):
            parse_predicate(["pos", "noun"])


class TestMatches:
    """Evaluating predicates against lexis fields."""

    def test_no_predicate_matches(self):
        assert matches(None, BARE)

    def test_equals(self):
        pred = parse_predicate({"pos": {"match": {"equals": "noun"}}})
        assert matches(pred, NOUN)
        assert not matches(pred, VERB)

    def test_oneof(self):
        pred = parse_predicate({"pos": {"match": {"oneof": ["noun", "adjective"]}}})
        assert matches(pred, NOUN)
        assert not matches(pred, VERB)

    def test_negation(self):
        pred = parse_predicate({"pos": {"not": {"equals": "noun"}}})
        assert not matches(pred, NOUN)
        assert matches(pred, VERB)

    def test_archaic_stringified(self):
        pred = parse_predicate({"archaic": {"match": {"equals": True}}})
        assert matches(pred, VERB)
        assert not matches(pred, NOUN)
        assert matches(parse_predicate({"archaic": "false"}), NOUN)

    def test_boolean_literals_in_lists(self):
        pred = parse_predicate({"archaic": {"match": {"oneof": [True]}}})
        assert pred == FieldMatch("archaic", OneOf(("true",)))
        assert matches(pred, VERB)
        assert not matches(pred, NOUN)
        assert matches(parse_predicate({"archaic": {"match": {"oneof": [False]}}}), NOUN)
        pred = parse_predicate({"archaic": {"not": {"oneof": [True, False]}}})
        assert not matches(pred, NOUN)
        assert not matches(pred, VERB)

    def test_boolean_tag_literal(self):
        lexis = Lexis(id="t", tags=("true",))
        assert matches(parse_predicate({"tags": {"match": {"equals": [True]}}}), lexis)

    def test_absent_pos_matches_only_default(self):
        assert not matches(parse_predicate({"pos": "noun"}), BARE)
        assert matches(parse_predicate({"pos": "none"}), BARE)
        assert matches(parse_predicate({"pos": {"match": {"equals": None}}}), BARE)

    def test_absent_word_fails_equals(self):
        pred = parse_predicate({"word": {"match": {"equals": ""}}})
        assert not matches(pred, BARE)
        assert matches(parse_predicate({"word": "burra"}), NOUN)

    def test_tags_membership(self):
        assert matches(parse_predicate({"tags": "textile"}), NOUN)
        assert not matches(parse_predicate({"tags": "loan"}), NOUN)

    def test_tags_oneof_is_intersection(self):
        assert matches(parse_predicate({"tags": {"match": {"oneof": ["loan", "common"]}}}), NOUN)
        assert not matches(parse_predicate({"tags": {"match": {"oneof": ["loan"]}}}), NOUN)

    def test_tags_equals_list_is_subset(self):
        pred = parse_predicate({"tags": {"match": {"equals": ["common", "textile"]}}})
        assert matches(pred, NOUN)
        pred = parse_predicate({"tags": {"match": {"equals": ["common", "rare"]}}})
        assert not matches(pred, NOUN)

    def test_historical_metadata(self):
        assert matches(parse_predicate({"historical_metadata": "attested"}), NOUN)
        assert not matches(parse_predicate({"historical_metadata": "attested"}), BARE)

    def test_all_of(self):
        pred = parse_predicate({"language": "Latin", "archaic": True})
        assert matches(pred, VERB)
        assert not matches(pred, NOUN)

    def test_top_level_not_of_several(self):
        pred = parse_predicate({"not": {"language": "Latin", "archaic": True}})
        assert matches(pred, NOUN)
        assert not matches(pred, VERB)
