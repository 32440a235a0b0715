"""Tests for project document loading."""

import json

import pytest

from kirum import (
    DuplicateEntityError,
    Etymon,
    MalformedArguments,
    ParseError,
    PartOfSpeech,
    UnknownField,
    load_document,
    load_project,
    load_projects,
)
from kirum.ingest import ProjectData, parse_lexis

YAML_PROJECT = """
words:
  latin-cloth:
    word: burra
    language: Latin
    part_of_speech: Noun
    tags: [textile]
    derivatives:
      - lexis:
          definition: a small cloth
          language: Latin
        transforms: [diminutive]
        # nested derivatives are normalized too
      - lexis:
          definition: cloth maker
          derivatives:
            - lexis: {definition: guild of cloth makers}
              transforms: [diminutive]
        transforms: [agent]
  old-french-burel:
    language: Old French
    etymology:
      etymons:
        - etymon: latin-cloth
          transforms: [latin-to-old-french]
transforms:
  diminutive:
    transforms:
      - postfix: {value: ula}
  agent:
    - postfix: {value: rius}
  latin-to-old-french:
    transforms:
      - dedouble: {letter: r, position: first}
      - letter_replace: {letter: {old: a, new: e}, replace: last}
      - postfix: {value: l}
    conditional:
      pos: {match: {equals: noun}}
globals:
  - transforms:
      - prefix: {value: "*"}
    conditional:
      lexis: {tags: {match: {oneof: [reconstructed]}}}
"""


class TestLoadDocument:
    """Reading documents from text, files and mappings."""

    def test_from_string(self):
        data = load_document(YAML_PROJECT)
        assert set(data) == {"words", "transforms", "globals"}

    def test_from_file(self, tmp_path):
        path = tmp_path / "project.yaml"
        path.write_text(YAML_PROJECT)
        assert load_document(path)["words"]["latin-cloth"]["word"] == "burra"
        assert "words" in load_document(str(path))

    def test_json_file(self, tmp_path):
        path = tmp_path / "tree.json"
        path.write_text(json.dumps({"words": {"a": {"word": "ka"}}}))
        assert load_document(path) == {"words": {"a": {"word": "ka"}}}

    def test_mapping_passthrough(self):
        data = {"words": {}}
        assert load_document(data) is data

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_document(tmp_path / "missing.yaml")

    def test_invalid_yaml_reports_line(self):
        with pytest.raises(ParseError) as exc:
            load_document("words:\n  a: [unclosed\n  b: 1\n")
        assert exc.value.line is not None
        assert "line" in str(exc.value)

    def test_empty_document(self):
        with pytest.raises(ParseError, match="Empty"):
            load_document("\n\n")

    def test_root_must_be_mapping(self):
        with pytest.raises(ParseError, match="mapping"):
            load_document("- a\n- b\n")


class TestParseLexis:
    """Single entries."""

    def test_fields(self):
        lexis = parse_lexis("x", {
            "word": "kata",
            "language": "Proto",
            "word_type": "root",
            "pos": "verb",
            "archaic": True,
            "tags": "motion",
            "historical_metadata": ["reconstructed"],
            "generate": "root",
            "definition": "to go",
        })
        assert str(lexis.word) == "kata"
        assert lexis.lexis_type == "root"
        assert lexis.pos is PartOfSpeech.VERB
        assert lexis.archaic is True
        assert lexis.tags == ("motion",)
        assert lexis.historical_metadata == ("reconstructed",)
        assert lexis.generate == "root"

    def test_letter_list(self):
        lexis = parse_lexis("x", {"word": ["rw", "a"]})
        assert len(lexis.word) == 2

    def test_etymons(self):
        lexis = parse_lexis("x", {"etymology": {"etymons": [
            {"etymon": "a", "transforms": ["t1", "t2"], "agglutination_order": 1},
            {"etymon": "b", "transforms": "t3"},
        ]}})
        assert lexis.etymons == (
            Etymon("a", ("t1", "t2"), 1),
            Etymon("b", ("t3",), 0),
        )

    def test_bad_pos(self):
        with pytest.raises(ParseError, match="part of speech"):
            parse_lexis("x", {"pos": "adverb"})

    def test_bad_order(self):
        with pytest.raises(ParseError, match="agglutination_order"):
            parse_lexis("x", {"etymology": {"etymons": [
                {"etymon": "a", "agglutination_order": "first"},
            ]}})

    def test_etymon_needs_id(self):
        with pytest.raises(ParseError):
            parse_lexis("x", {"etymology": {"etymons": [{"transforms": ["t"]}]}})

    @pytest.mark.parametrize("value", ["false", "no", 0, 1])
    def test_archaic_must_be_boolean(self, value):
        with pytest.raises(ParseError, match="archaic"):
            parse_lexis("x", {"archaic": value})

    def test_empty_word_is_absent(self):
        assert parse_lexis("x", {"word": ""}).word is None
        assert parse_lexis("x", {"word": []}).word is None


class TestLoadProject:
    """Building projects from documents."""

    def test_derivatives_normalized(self):
        project = load_project(YAML_PROJECT)
        graph = project.graph
        first = graph.get("latin-cloth-autoderive-0")
        assert first.etymons == (Etymon("latin-cloth", ("diminutive",), 0),)
        assert first.definition == "a small cloth"
        nested = graph.get("latin-cloth-autoderive-1-autoderive-0")
        assert nested.etymons[0].etymon == "latin-cloth-autoderive-1"

    def test_words(self):
        words = load_project(YAML_PROJECT).words()
        assert words["old-french-burel"] == "burel"
        assert words["latin-cloth-autoderive-0"] == "burraula"
        assert words["latin-cloth-autoderive-1"] == "burrarius"
        assert words["latin-cloth-autoderive-1-autoderive-0"] == "burrariusula"

    def test_globals_loaded(self):
        project = load_project(YAML_PROJECT)
        assert len(project.global_rules) == 1
        assert project.global_rules[0].name == "global #1"

    def test_globals_mapping_form(self):
        project = load_project({
            "words": {"a": {"word": "ka"}, "b": {"etymology": {"etymons": [{"etymon": "a"}]}}},
            "globals": {"transforms": [{"transforms": [{"postfix": {"value": "!"}}]}]},
        })
        assert project.word("b") == "ka!"

    def test_phonetics_section(self):
        project = load_project({
            "words": {"seed": {"generate": "w"}},
            "phonetics": {"groups": {"V": ["a"]}, "lexis_types": {"w": ["tV"]}},
        })
        assert project.word("seed") == "ta"

    def test_merge_documents(self):
        project = load_projects([
            {"words": {"a": {"word": "ka"}}, "phonetics": {"groups": {"V": ["a"]}}},
            {
                "words": {"b": {"etymology": {"etymons": [{"etymon": "a", "transforms": ["s"]}]}},
                          "c": {"generate": "w"}},
                "transforms": {"s": [{"postfix": {"value": "s"}}]},
                "phonetics": {"lexis_types": {"w": ["V"]}},
            },
        ])
        assert project.words() == {"a": "ka", "b": "kas", "c": "a"}

    def test_empty_word_derives_from_etymon(self):
        project = load_project({
            "words": {
                "a": {"word": "kratia"},
                "b": {"word": "", "etymology": {"etymons": [{"etymon": "a"}]}},
            },
        })
        assert project.word("b") == "kratia"
        assert project.validate() == []

    def test_duplicate_across_documents(self):
        with pytest.raises(DuplicateEntityError):
            load_projects([{"words": {"a": {"word": "x"}}}, {"words": {"a": {"word": "y"}}}])

    def test_unknown_top_level_key(self):
        with pytest.raises(ParseError, match="templates"):
            load_project({"words": {}, "templates": {}})

    def test_bad_transform_definition(self):
        with pytest.raises(MalformedArguments) as exc:
            load_project({"transforms": {"bad": [{"postfix": {"value": 3}}]}})
        assert exc.value.transform == "bad"

    def test_bad_conditional_field(self):
        with pytest.raises(UnknownField):
            load_project({"transforms": {"bad": {"transforms": [], "conditional": {"colour": "red"}}}})

    def test_project_data_accumulates(self):
        data = ProjectData()
        data.add_document({"transforms": {"s": [{"postfix": {"value": "s"}}]}})
        data.add_document({"globals": [{"transforms": ["loanword"]}]})
        data.add_document({"globals": [{"transforms": ["loanword"]}]})
        assert "s" in data.transforms
        assert [r.name for r in data.global_rules] == ["global #1", "global #2"]
