"""Custom exception hierarchy for kirum."""

from __future__ import annotations

from collections.abc import Sequence


class KirumError(Exception):
    """Base exception for all kirum errors."""


class UnknownReference(KirumError):
    """A referenced lexis or transform id does not exist."""

    def __init__(
        self,
        reference: str,
        *,
        kind: str = "lexis",
        referrer: str | None = None,
    ) -> None:
        self.reference = reference
        self.kind = kind
        self.referrer = referrer
        message = f"unknown {kind} '{reference}'"
        if referrer is not None:
            message += f" referenced by '{referrer}'"
        super().__init__(message)


class UnknownField(KirumError):
    """A predicate names a lexis field the matcher does not recognize."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"unknown lexis field '{field}' in conditional")


class UnknownGroupOrKey(KirumError):
    """A phonetic pattern or lexis names an undeclared group or key."""

    def __init__(self, symbol: str, *, kind: str = "group") -> None:
        self.symbol = symbol
        self.kind = kind
        super().__init__(f"unknown phonetic {kind} '{symbol}'")


class MalformedArguments(KirumError):
    """A primitive or predicate definition does not fit its schema."""

    def __init__(self, message: str, *, transform: str | None = None) -> None:
        self.transform = transform
        if transform is not None:
            message = f"transform '{transform}': {message}"
        super().__init__(message)


class CycleDetected(KirumError):
    """The etymology graph contains a cycle."""

    def __init__(self, path: Sequence[str]) -> None:
        self.path = tuple(path)
        super().__init__(f"etymology cycle detected: {' -> '.join(self.path)}")


class UnderspecifiedLexis(KirumError):
    """A lexis has no word, no generate key and no etymons."""

    def __init__(self, lexis_id: str) -> None:
        self.lexis_id = lexis_id
        super().__init__(
            f"lexis '{lexis_id}' has no word, no generate key and no etymons"
        )


class PhoneticRecursionLimitExceeded(KirumError):
    """Phonetic group expansion nested deeper than the allowed bound."""

    def __init__(self, symbol: str, limit: int) -> None:
        self.symbol = symbol
        self.limit = limit
        super().__init__(
            f"phonetic expansion of '{symbol}' exceeded depth {limit}"
        )


class ScriptTransformFailure(KirumError):
    """An external script transform reported an error."""

    def __init__(self, lexis_id: str, file: str, reason: str) -> None:
        self.lexis_id = lexis_id
        self.file = file
        self.reason = reason
        super().__init__(
            f"script '{file}' failed for lexis '{lexis_id}': {reason}"
        )


class DuplicateEntityError(KirumError):
    """Entity with same ID already exists."""


class ParseError(KirumError):
    """A project document could not be parsed."""

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        if line is not None:
            message = f"{message} (line {line})"
        super().__init__(message)
