"""Domain model dataclasses and enums for kirum."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from kirum.lemma import Lemma

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class PartOfSpeech(str, Enum):
    """Part-of-speech tags for lexical entries."""

    NONE = "none"
    NOUN = "noun"
    VERB = "verb"
    ADJECTIVE = "adjective"

    @classmethod
    def parse(cls, value: str | PartOfSpeech | None) -> PartOfSpeech:
        """Parse a part-of-speech name, accepting ``None`` and any case."""
        if value is None:
            return cls.NONE
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(
                f"invalid part of speech '{value}'. Valid: {valid}"
            ) from None


class LetterPlace(str, Enum):
    """Which occurrences of a letter a primitive acts on."""

    FIRST = "first"
    LAST = "last"
    ALL = "all"


class ValidationSeverity(str, Enum):
    """Severity level for validation results."""

    ERROR = "ERROR"
    WARNING = "WARNING"


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Etymon:
    """A directed link from a derived lexis to one ancestor."""

    etymon: str
    transforms: tuple[str, ...] = ()
    agglutination_order: int = 0


@dataclass(frozen=True, slots=True)
class Lexis:
    """A lexical entry: a word, stem or root with its metadata."""

    id: str
    word: Lemma | None = None
    language: str = ""
    lexis_type: str = ""
    definition: str = ""
    pos: PartOfSpeech = PartOfSpeech.NONE
    archaic: bool = False
    tags: tuple[str, ...] = ()
    generate: str | None = None
    historical_metadata: tuple[str, ...] = ()
    etymons: tuple[Etymon, ...] = ()

    def ordered_etymons(self) -> list[Etymon]:
        """Etymons by agglutination order; ties keep declaration order."""
        return sorted(self.etymons, key=lambda e: e.agglutination_order)


@dataclass(frozen=True, slots=True)
class ResolvedRecord:
    """One rendered lexicon row, ready for an external formatter."""

    id: str
    language: str
    word: str
    definition: str
    pos: PartOfSpeech
    archaic: bool
    tags: tuple[str, ...]
    lexis_type: str = ""


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """A single validation finding (error or warning)."""

    rule_id: str
    severity: str
    entity_type: str
    entity_id: str
    message: str
    details: dict[str, Any] | None


@dataclass
class LexiconStats:
    """Counts over a lexicon, by part of speech, language and type."""

    total: int = 0
    by_pos: dict[str, int] = field(default_factory=dict)
    by_language: dict[str, int] = field(default_factory=dict)
    by_type: dict[str, int] = field(default_factory=dict)
