"""Letter-sequence word values.

A language's idea of a "letter" is not always a single Unicode code point, so
words are stored as tuples of letters. A plain string is split into one letter
per base character (keeping any combining marks attached to it); an explicit
list keeps its elements as given, so ``["rw", "a"]`` is a two-letter word.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Union

from kirum.models import LetterPlace

LemmaLike = Union["Lemma", str, Iterable[str]]


def split_letters(text: str) -> tuple[str, ...]:
    """Split a string into letters, attaching combining marks to their base."""
    letters: list[str] = []
    for char in unicodedata.normalize("NFC", text):
        if letters and unicodedata.combining(char):
            letters[-1] += char
        else:
            letters.append(char)
    return tuple(letters)


@dataclass(frozen=True, slots=True)
class Lemma:
    """An immutable word, stored as a sequence of letters."""

    letters: tuple[str, ...] = ()

    @classmethod
    def of(cls, value: LemmaLike) -> Lemma:
        """Build a lemma from a string, a letter list or another lemma."""
        if isinstance(value, Lemma):
            return value
        if isinstance(value, str):
            return cls(split_letters(value))
        return cls(tuple(str(letter) for letter in value if str(letter)))

    def __str__(self) -> str:
        return "".join(self.letters)

    def __len__(self) -> int:
        return len(self.letters)

    def __iter__(self) -> Iterator[str]:
        return iter(self.letters)

    def __bool__(self) -> bool:
        return bool(self.letters)

    def __add__(self, other: Lemma) -> Lemma:
        return Lemma(self.letters + other.letters)

    # ------------------------------------------------------------------
    # Letter operations
    # ------------------------------------------------------------------

    def replace(self, old: Lemma, new: Lemma, place: LetterPlace) -> Lemma:
        """Replace the first, last or every occurrence of ``old``."""
        spans = self._find(old.letters)
        if not spans:
            return self
        if place is LetterPlace.FIRST:
            spans = spans[:1]
        elif place is LetterPlace.LAST:
            spans = spans[-1:]
        out: list[str] = []
        cursor = 0
        for start in spans:
            out.extend(self.letters[cursor:start])
            out.extend(new.letters)
            cursor = start + len(old)
        out.extend(self.letters[cursor:])
        return Lemma(tuple(out))

    def remove(self, letter: Lemma, place: LetterPlace) -> Lemma:
        return self.replace(letter, Lemma(), place)

    def double(self, letter: str, place: LetterPlace) -> Lemma:
        """Double the first, last or every occurrence of ``letter``."""
        hits = [i for i, cur in enumerate(self.letters) if cur == letter]
        if not hits:
            return self
        if place is LetterPlace.FIRST:
            hits = hits[:1]
        elif place is LetterPlace.LAST:
            hits = hits[-1:]
        out = list(self.letters)
        for index in reversed(hits):
            out.insert(index, letter)
        return Lemma(tuple(out))

    def dedouble(self, letter: str, place: LetterPlace) -> Lemma:
        """Collapse a doubled ``letter``; a no-op if it never repeats."""
        repeats = [
            i
            for i in range(1, len(self.letters))
            if self.letters[i] == letter and self.letters[i - 1] == letter
        ]
        if not repeats:
            return self
        if place is LetterPlace.FIRST:
            repeats = repeats[:1]
        elif place is LetterPlace.LAST:
            repeats = repeats[-1:]
        drop = set(repeats)
        return Lemma(
            tuple(cur for i, cur in enumerate(self.letters) if i not in drop)
        )

    def match_replace(self, old: Lemma, new: Lemma) -> Lemma:
        """Replace the first exact occurrence of the whole ``old`` sequence."""
        return self.replace(old, new, LetterPlace.FIRST)

    def rearrange(self, items: Iterable[int | str]) -> Lemma:
        """Rebuild the word from letter positions and literal letters."""
        out: list[str] = []
        for item in items:
            if isinstance(item, int):
                if 0 <= item < len(self.letters):
                    out.append(self.letters[item])
            else:
                out.extend(Lemma.of(item).letters)
        return Lemma(tuple(out))

    def _find(self, needle: tuple[str, ...]) -> list[int]:
        """Start indices of non-overlapping occurrences, left to right."""
        if not needle:
            return []
        size = len(needle)
        found: list[int] = []
        i = 0
        while i <= len(self.letters) - size:
            if self.letters[i:i + size] == needle:
                found.append(i)
                i += size
            else:
                i += 1
        return found
