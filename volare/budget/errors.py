from __future__ import annotations

import enum
from dataclasses import dataclass


class ErrorKind(enum.Enum):
    QUOTA = "quota"
    SAFETY = "safety"
    NETWORK = "network"
    NOT_FOUND = "not_found"
    PARSING = "parsing"
    EMPTY = "empty"
    GENERIC = "generic"


class ServiceError(Exception):
    """The only failure the budget path lets escape to its caller."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind,
        raw_cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.raw_cause = raw_cause

    def __repr__(self) -> str:
        return f"ServiceError(kind={self.kind.value!r}, message={self.message!r})"


@dataclass(frozen=True)
class ErrorGuidance:
    title: str
    fix: str
    credential_action: bool = False


ERROR_GUIDANCE: dict[ErrorKind, ErrorGuidance] = {
    ErrorKind.QUOTA: ErrorGuidance(
        title="Usage limit reached",
        fix="The AI service quota is exhausted. Wait a minute or switch to another API key.",
    ),
    ErrorKind.SAFETY: ErrorGuidance(
        title="Request blocked by safety filters",
        fix="Rephrase the city name or pick different categories, then try again.",
    ),
    ErrorKind.NETWORK: ErrorGuidance(
        title="No connection",
        fix="Check your internet connection and retry.",
    ),
    ErrorKind.NOT_FOUND: ErrorGuidance(
        title="API key not found",
        fix="The configured API key is invalid or missing. Select a valid key.",
        credential_action=True,
    ),
    ErrorKind.PARSING: ErrorGuidance(
        title="Unreadable answer",
        fix="The AI service returned data we could not read. Please retry.",
    ),
    ErrorKind.EMPTY: ErrorGuidance(
        title="Empty answer",
        fix="The AI service returned no budget data. Please retry.",
    ),
    ErrorKind.GENERIC: ErrorGuidance(
        title="Something went wrong",
        fix="Check your connection and retry.",
    ),
}


# Bump when the table below changes; the substring markers track the literal
# error text of the Gemini API and break silently when it changes.
CLASSIFICATION_RULES_VERSION = 1


@dataclass(frozen=True)
class _Rule:
    kind: ErrorKind
    status_codes: frozenset[int] = frozenset()
    markers: tuple[str, ...] = ()
    case_sensitive: bool = False

    def matches(self, status_code: int | None, message: str) -> bool:
        if status_code is not None and status_code in self.status_codes:
            return True
        haystack = message if self.case_sensitive else message.lower()
        for marker in self.markers:
            needle = marker if self.case_sensitive else marker.lower()
            if needle in haystack:
                return True
        return False


# First match wins. Connectivity is checked before any of these.
_RULES: tuple[_Rule, ...] = (
    _Rule(ErrorKind.QUOTA, frozenset({429}), ("429", "quota")),
    _Rule(ErrorKind.SAFETY, markers=("safety",)),
    _Rule(
        ErrorKind.NOT_FOUND,
        frozenset({404}),
        ("Requested entity was not found",),
        case_sensitive=True,
    ),
)


def _status_code(exc: BaseException) -> int | None:
    """Best-effort HTTP status from a transport exception."""
    for attr in ("code", "status_code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value

    response = getattr(exc, "response", None)
    value = getattr(response, "status_code", None)
    if isinstance(value, int) and not isinstance(value, bool):
        return value

    return None


def classify_error(exc: BaseException, *, online: bool = True) -> ServiceError:
    """Turn any failure of the budget path into a ServiceError."""
    if isinstance(exc, ServiceError):
        return exc

    message = str(exc) or exc.__class__.__name__

    if not online:
        return ServiceError(message, ErrorKind.NETWORK, exc)

    status_code = _status_code(exc)
    for rule in _RULES:
        if rule.matches(status_code, message):
            return ServiceError(message, rule.kind, exc)

    return ServiceError(message, ErrorKind.GENERIC, exc)
