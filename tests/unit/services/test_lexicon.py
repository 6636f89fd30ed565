"""
Unit Tests for the Lexicon Table

Tests normalization, script-aware matching and loading of override
files.
"""

import json

import pytest
from pydantic import ValidationError

from saathi.domain.exceptions import InputError
from saathi.services.safety import Lexicon, load_lexicon, normalize_text


class TestNormalizeText:
    """Tests for message normalization."""

    def test_lowercases_and_collapses_whitespace(self) -> None:
        """Case and spacing never affect matching."""
        assert normalize_text("  I  Feel   SO tired \n") == "i feel so tired"

    def test_folds_typographic_apostrophes(self) -> None:
        """Curly apostrophes match straight ones in the table."""
        assert normalize_text("I can’t cope") == "i can't cope"

    def test_rejects_non_string(self) -> None:
        with pytest.raises(InputError):
            normalize_text(42)


class TestLexiconMatching:
    """Tests for table lookups across scripts."""

    def test_latin_terms_match_on_token_boundaries(self, lexicon: Lexicon) -> None:
        """'mad' must not fire inside 'made'."""
        assert "anger" not in lexicon.find(normalize_text("I made dinner"), "emotion")
        assert "anger" in lexicon.find(normalize_text("I am so mad"), "emotion")

    def test_latin_risk_terms_match_inflections(self, lexicon: Lexicon) -> None:
        hits = lexicon.find(normalize_text("the hopelessness is back"), "risk")

        assert [e.term for e in hits["hopelessness"]] == ["hopeless"]

    def test_immediacy_terms_stay_whole_word(self, lexicon: Lexicon) -> None:
        assert "immediacy" not in lexicon.find(normalize_text("I know"), "context")
        assert "immediacy" in lexicon.find(normalize_text("right now"), "context")

    def test_default_match_modes(self) -> None:
        lexicon = Lexicon.from_document({
            "entries": [
                {"kind": "risk", "category": "hopelessness", "term": "hopeless", "weight": 5},
                {"kind": "context", "category": "harm", "term": "hurt"},
                {"kind": "context", "category": "immediacy", "term": "now"},
                {"kind": "emotion", "category": "anger", "term": "mad"},
                {"kind": "risk", "category": "isolation", "term": "alone", "weight": 5, "match": "token"},
            ],
        })

        assert [e.match_mode for e in lexicon.entries] == ["prefix", "prefix", "token", "token", "token"]
        assert "isolation" not in lexicon.find("so alonely", "risk")

    def test_multi_word_term_matches(self, lexicon: Lexicon) -> None:
        hits = lexicon.find(normalize_text("I just can't cope anymore"), "risk")

        assert "emotional_distress" in hits
        assert [e.term for e in hits["emotional_distress"]] == ["can't cope"]

    def test_devanagari_terms_match_as_substrings(self, lexicon: Lexicon) -> None:
        """Devanagari rows match inside inflected words."""
        hits = lexicon.find(normalize_text("मैं बहुत निराश हूँ"), "risk")

        assert "hopelessness" in hits

    def test_devanagari_token_rows_respect_boundaries(self, lexicon: Lexicon) -> None:
        """Short rows flagged as token matches do not fire inside longer words."""
        assert "anxiety" not in lexicon.find(normalize_text("डरावना सपना"), "emotion")
        assert "anxiety" in lexicon.find(normalize_text("मुझे डर लग रहा है"), "emotion")

    def test_code_mixed_message_checks_every_script(self, lexicon: Lexicon) -> None:
        """Hinglish input hits both Latin and Devanagari rows."""
        hits = lexicon.find(normalize_text("yaar bahut tension hai, चिंता हो रही है"), "emotion")

        assert {"stress", "anxiety"} <= set(hits)

    def test_empty_text_has_no_hits(self, lexicon: Lexicon) -> None:
        assert lexicon.find("", "risk") == {}

    def test_categories_in_table_order(self, lexicon: Lexicon) -> None:
        assert lexicon.categories("risk")[0] == "suicidal_ideation"
        assert "formal_marker" in lexicon.categories("cultural")


class TestLexiconLoading:
    """Tests for packaged and override tables."""

    def test_packaged_table_is_versioned(self) -> None:
        lexicon = load_lexicon()

        assert lexicon.version == "2024.2"
        assert len(lexicon) > 100
        assert lexicon.boosts.plan_with_harm == 8
        assert lexicon.boosts.immediacy == 3

    def test_override_file(self, tmp_path) -> None:
        """An override file fully replaces the packaged table."""
        path = tmp_path / "lexicon.json"
        path.write_text(json.dumps({
            "version": "test",
            "entries": [
                {"kind": "risk", "category": "hopelessness", "term": "bleak", "weight": 5},
            ],
        }), encoding="utf-8")

        lexicon = load_lexicon(str(path))

        assert lexicon.version == "test"
        assert len(lexicon) == 1
        assert "hopelessness" in lexicon.find("everything is bleak", "risk")

    def test_unknown_category_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Lexicon.from_document({
                "entries": [
                    {"kind": "risk", "category": "boredom", "term": "bored", "weight": 1},
                ],
            })

    def test_empty_table_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Lexicon.from_document({"entries": []})
