"""
Multi-Script Lexicon Table

Data-driven keyword table used by the risk scanner, the signal
extractors and cultural context analysis. Each row is
``(kind, category, term, weight, script)``; the table ships as
``saathi/config/lexicon.json`` and can be replaced through
``SAATHI_SAFETY_LEXICON_PATH``.

Matching rules:
- Text is NFC-normalized, lower-cased, apostrophes folded and
  whitespace collapsed before matching.
- Latin risk terms and the plan/harm context terms match as word
  prefixes, so "hopelessness" and "overdosed" still fire. Other Latin
  rows match whole tokens ("mad" never fires inside "made").
- Devanagari and mixed-script terms match as substrings.
- A row can force a mode with ``"match": "token" | "prefix" | "substring"``.
- Every script is checked against every message (no language gate).

CLINICAL_VALIDATION_REQUIRED: Weights and terms must be reviewed by
clinicians fluent in each supported language.
"""

import json
import re
import unicodedata
from functools import lru_cache
from importlib import resources
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from saathi.config.logging_config import get_logger
from saathi.domain.enums import EMOTION_PRIORITY, ProtectiveCategory, RiskCategory
from saathi.domain.exceptions import InputError

logger = get_logger(__name__)

LexiconKind = Literal["risk", "protective", "emotion", "context", "cultural"]

CONTEXT_CATEGORIES: frozenset[str] = frozenset({"plan", "harm", "immediacy"})

# Context rows that match inflections like the risk rows they qualify
PREFIX_CONTEXT_CATEGORIES: frozenset[str] = frozenset({"plan", "harm"})

# Devanagari block counts as word characters so vowel signs never split a token
_WORD_CHARS = r"\w\u0900-\u097F"

_APOSTROPHES = str.maketrans({"’": "'", "‘": "'", "ʼ": "'"})


def normalize_text(text: object) -> str:
    """
    Normalize message text for matching.

    Raises:
        InputError: If text is not a string
    """
    if not isinstance(text, str):
        raise InputError(f"Expected message text, got {type(text).__name__}")
    normalized = unicodedata.normalize("NFC", text).translate(_APOSTROPHES).lower()
    return " ".join(normalized.split())


class LexiconEntry(BaseModel):
    """One row of the lexicon table."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: LexiconKind
    category: str = Field(min_length=1)
    term: str = Field(min_length=1)
    weight: float = Field(default=0.0, ge=0.0)
    script: Literal["latin", "devanagari", "mixed"] = "latin"
    match: Optional[Literal["token", "prefix", "substring"]] = None

    @model_validator(mode="after")
    def validate_category(self) -> "LexiconEntry":
        """Categories must belong to the vocabulary of their kind."""
        allowed: Optional[set[str]] = None
        if self.kind == "risk":
            allowed = {c.value for c in RiskCategory}
        elif self.kind == "protective":
            allowed = {c.value for c in ProtectiveCategory}
        elif self.kind == "emotion":
            allowed = {e.value for e in EMOTION_PRIORITY}
        elif self.kind == "context":
            allowed = set(CONTEXT_CATEGORIES)
        if allowed is not None and self.category not in allowed:
            raise ValueError(f"Unknown {self.kind} category: {self.category}")
        return self

    @property
    def match_mode(self) -> str:
        if self.match:
            return self.match
        if self.script != "latin":
            return "substring"
        if self.kind == "risk" or (self.kind == "context" and self.category in PREFIX_CONTEXT_CATEGORIES):
            return "prefix"
        return "token"


class LexiconBoosts(BaseModel):
    """Contextual boosts applied once per message."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    plan_with_harm: float = Field(default=8.0, ge=0.0)
    immediacy: float = Field(default=3.0, ge=0.0)


class LexiconFile(BaseModel):
    """Schema of the lexicon JSON document."""

    version: str = "unversioned"
    boosts: LexiconBoosts = Field(default_factory=LexiconBoosts)
    entries: list[LexiconEntry] = Field(min_length=1)


def _compile(entry: LexiconEntry) -> re.Pattern[str]:
    term = re.escape(normalize_text(entry.term))
    if entry.match_mode == "token":
        return re.compile(rf"(?<![{_WORD_CHARS}]){term}(?![{_WORD_CHARS}])")
    if entry.match_mode == "prefix":
        return re.compile(rf"(?<![{_WORD_CHARS}]){term}")
    return re.compile(term)


class Lexicon:
    """
    Compiled, immutable lexicon.

    Thread-safe for concurrent reads; holds no mutable state after
    construction.
    """

    def __init__(
        self,
        entries: list[LexiconEntry],
        boosts: Optional[LexiconBoosts] = None,
        version: str = "unversioned",
    ) -> None:
        self._rows: tuple[tuple[LexiconEntry, re.Pattern[str]], ...] = tuple(
            (entry, _compile(entry)) for entry in entries
        )
        self.boosts = boosts or LexiconBoosts()
        self.version = version

    @classmethod
    def from_document(cls, document: dict) -> "Lexicon":
        """Build from a parsed JSON document (validated)."""
        parsed = LexiconFile.model_validate(document)
        return cls(parsed.entries, parsed.boosts, parsed.version)

    @classmethod
    def from_path(cls, path: str) -> "Lexicon":
        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)
        lexicon = cls.from_document(document)
        logger.info("Loaded lexicon", path=path, version=lexicon.version, entry_count=len(lexicon))
        return lexicon

    def __len__(self) -> int:
        return len(self._rows)

    @property
    def entries(self) -> list[LexiconEntry]:
        return [entry for entry, _ in self._rows]

    def categories(self, kind: LexiconKind) -> list[str]:
        """Categories of a kind, in table order."""
        seen: dict[str, None] = {}
        for entry, _ in self._rows:
            if entry.kind == kind:
                seen.setdefault(entry.category, None)
        return list(seen)

    def find(self, normalized_text: str, kind: LexiconKind) -> dict[str, list[LexiconEntry]]:
        """
        Find matching entries of one kind.

        Args:
            normalized_text: Output of ``normalize_text``
            kind: Row kind to search

        Returns:
            Matching entries grouped by category (table order)
        """
        hits: dict[str, list[LexiconEntry]] = {}
        if not normalized_text:
            return hits
        for entry, pattern in self._rows:
            if entry.kind == kind and pattern.search(normalized_text):
                hits.setdefault(entry.category, []).append(entry)
        return hits

    def count_hits(self, normalized_text: str, kind: LexiconKind) -> dict[str, int]:
        return {category: len(found) for category, found in self.find(normalized_text, kind).items()}


@lru_cache(maxsize=1)
def _packaged_lexicon() -> Lexicon:
    source = resources.files("saathi.config").joinpath("lexicon.json")
    document = json.loads(source.read_text(encoding="utf-8"))
    return Lexicon.from_document(document)


def load_lexicon(path: Optional[str] = None) -> Lexicon:
    """
    Load the lexicon table.

    Args:
        path: Optional override file; the packaged table is used
            when omitted

    Returns:
        Compiled Lexicon
    """
    if path:
        return Lexicon.from_path(path)
    return _packaged_lexicon()
