# valija/errors.py
"""
Valija Error Types

Error handling for the Valija runtime. Every failure the runtime can
surface is an instance of ``ValijaError`` carrying a structured
``ErrorMessage`` (code, message, notes, hint).

Error Hierarchy:
────────────────
┌─────────────────────────────────────────────────────────────────────┐
│  ValijaError (base)                                                 │
│  ├── ValijaTypeError       - type violations (also a TypeError)     │
│  │   ├── NotCallableError  - callable required, something else given│
│  │   └── FrozenObjectError - write/delete on a frozen object        │
│  ├── ValijaReferenceError  - unreachable outer name (a NameError)   │
│  ├── ConfigurationError    - bad runtime/mitigator configuration    │
│  └── InternalError         - broken runtime invariant               │
└─────────────────────────────────────────────────────────────────────┘

Error Codes:
────────────
Codes follow the pattern VLJ-NNNN:
  - 2000-2999: Type violations
  - 3000-3999: Lookup failures
  - 4000-4999: Configuration errors
  - 9000-9999: Internal errors

Example Usage:
──────────────
    from valija.errors import ValijaTypeError, ValijaErrorCodes

    raise ValijaTypeError(
        "expected a function",
        code=ValijaErrorCodes.NOT_CALLABLE,
        expected_type="function",
        actual_type="object",
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto, unique
from typing import List, Optional

__all__ = [
    "ErrorPhase",
    "ErrorCategory",
    "ErrorCode",
    "ValijaErrorCodes",
    "ErrorNote",
    "ErrorMessage",
    "ValijaError",
    "ValijaTypeError",
    "NotCallableError",
    "FrozenObjectError",
    "ValijaReferenceError",
    "ConfigurationError",
    "InternalError",
]


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR CLASSIFICATION
# ═══════════════════════════════════════════════════════════════════════════════

@unique
class ErrorPhase(Enum):
    """Where in the runtime the error was raised."""

    ACCESS = "access"          # property read/write/delete/enumerate
    RESOLVE = "resolve"        # shadow resolution
    DEFINE = "define"          # function definition (dis)
    OUTERS = "outers"          # outer binding environment
    CONFIG = "config"          # configuration / mitigator setup
    INTERNAL = "internal"      # runtime internals


@unique
class ErrorCategory(Enum):
    """Fine-grained categories for filtering."""

    TYPE_VIOLATION = auto()
    NOT_CALLABLE = auto()
    FROZEN_OBJECT = auto()
    NULL_BASE = auto()
    PRIMITIVE_BASE = auto()

    UNDEFINED_NAME = auto()

    BAD_OPTION = auto()
    MISSING_REWRITER = auto()

    DUPLICATE_SHADOW = auto()
    INTERNAL_ERROR = auto()


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR CODES
# ═══════════════════════════════════════════════════════════════════════════════

class ErrorCode:
    """
    Structured error code of the form ``VLJ-NNNN``.
    """

    __slots__ = ("prefix", "number", "category", "phase")

    def __init__(
        self,
        prefix: str,
        number: int,
        category: ErrorCategory,
        phase: ErrorPhase,
    ) -> None:
        self.prefix = prefix
        self.number = number
        self.category = category
        self.phase = phase

    @property
    def code(self) -> str:
        """Get the full error code string."""
        return f"{self.prefix}-{self.number:04d}"

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"ErrorCode({self.code!r}, {self.category.name})"

    def __hash__(self) -> int:
        return hash((self.prefix, self.number))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ErrorCode):
            return self.prefix == other.prefix and self.number == other.number
        if isinstance(other, str):
            return self.code == other
        return False


class ValijaErrorCodes:
    """Predefined error codes for the Valija runtime."""

    # ─── Type violations (2000-2999) ───────────────────────────────────────
    TYPE_VIOLATION = ErrorCode("VLJ", 2001, ErrorCategory.TYPE_VIOLATION, ErrorPhase.ACCESS)
    NOT_CALLABLE = ErrorCode("VLJ", 2002, ErrorCategory.NOT_CALLABLE, ErrorPhase.ACCESS)
    FROZEN_OBJECT = ErrorCode("VLJ", 2003, ErrorCategory.FROZEN_OBJECT, ErrorPhase.ACCESS)
    NULL_BASE = ErrorCode("VLJ", 2004, ErrorCategory.NULL_BASE, ErrorPhase.ACCESS)
    PRIMITIVE_BASE = ErrorCode("VLJ", 2005, ErrorCategory.PRIMITIVE_BASE, ErrorPhase.ACCESS)

    # ─── Lookup failures (3000-3999) ───────────────────────────────────────
    UNDEFINED_NAME = ErrorCode("VLJ", 3001, ErrorCategory.UNDEFINED_NAME, ErrorPhase.OUTERS)

    # ─── Configuration (4000-4999) ─────────────────────────────────────────
    BAD_OPTION = ErrorCode("VLJ", 4001, ErrorCategory.BAD_OPTION, ErrorPhase.CONFIG)
    MISSING_REWRITER = ErrorCode("VLJ", 4002, ErrorCategory.MISSING_REWRITER, ErrorPhase.CONFIG)

    # ─── Internal (9000-9999) ──────────────────────────────────────────────
    INTERNAL_ERROR = ErrorCode("VLJ", 9001, ErrorCategory.INTERNAL_ERROR, ErrorPhase.INTERNAL)
    DUPLICATE_SHADOW = ErrorCode("VLJ", 9002, ErrorCategory.DUPLICATE_SHADOW, ErrorPhase.RESOLVE)


# ═══════════════════════════════════════════════════════════════════════════════
# MESSAGES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class ErrorNote:
    """Additional context attached to an error."""

    message: str
    label: str = "note"


@dataclass
class ErrorMessage:
    """A complete, formatted error record."""

    code: ErrorCode
    message: str
    notes: List[ErrorNote] = field(default_factory=list)
    hint: str = ""

    def add_note(self, message: str, label: str = "note") -> "ErrorMessage":
        self.notes.append(ErrorNote(message=message, label=label))
        return self

    def with_hint(self, hint: str) -> "ErrorMessage":
        self.hint = hint
        return self

    def format(self) -> str:
        """Render as ``VLJ-NNNN: message`` followed by note and hint lines."""
        lines = [f"{self.code}: {self.message}"]
        for note in self.notes:
            lines.append(f"  {note.label}: {note.message}")
        if self.hint:
            lines.append(f"  hint: {self.hint}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "code": self.code.code,
            "category": self.code.category.name,
            "phase": self.code.phase.value,
            "message": self.message,
            "notes": [{"label": n.label, "message": n.message} for n in self.notes],
            "hint": self.hint,
        }


# ═══════════════════════════════════════════════════════════════════════════════
# EXCEPTION CLASSES
# ═══════════════════════════════════════════════════════════════════════════════

class ValijaError(Exception):
    """
    Base exception for all Valija runtime errors.

    Carries a structured ``ErrorMessage`` that can be rendered or
    serialised.
    """

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        notes: Optional[List[ErrorNote]] = None,
        hint: str = "",
    ) -> None:
        super().__init__(message)
        self.error_message = ErrorMessage(
            code=code or ValijaErrorCodes.INTERNAL_ERROR,
            message=message,
            notes=list(notes or []),
            hint=hint,
        )

    @property
    def code(self) -> ErrorCode:
        return self.error_message.code

    @property
    def message(self) -> str:
        return self.error_message.message

    def add_note(self, message: str, label: str = "note") -> "ValijaError":
        """Add a note to this error."""
        self.error_message.add_note(message, label)
        return self

    def with_hint(self, hint: str) -> "ValijaError":
        """Add a hint to this error."""
        self.error_message.with_hint(hint)
        return self

    def __str__(self) -> str:
        return self.error_message.format()


# ───────────────────────────────────────────────────────────────────────────────
# TYPE VIOLATIONS
# ───────────────────────────────────────────────────────────────────────────────

class ValijaTypeError(ValijaError, TypeError):
    """An operation was given a value of the wrong runtime type."""

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        expected_type: str = "",
        actual_type: str = "",
        **kwargs,
    ) -> None:
        super().__init__(
            message=message,
            code=code or ValijaErrorCodes.TYPE_VIOLATION,
            **kwargs,
        )
        self.expected_type = expected_type
        self.actual_type = actual_type

        if expected_type and actual_type:
            self.add_note(f"Expected type: {expected_type}")
            self.add_note(f"Actual type: {actual_type}")


class NotCallableError(ValijaTypeError):
    """A callable was required."""

    def __init__(self, what: str, actual_type: str = "", **kwargs) -> None:
        super().__init__(
            message=f"{what} is not a function",
            code=ValijaErrorCodes.NOT_CALLABLE,
            expected_type="function",
            actual_type=actual_type,
            **kwargs,
        )


class FrozenObjectError(ValijaTypeError):
    """Attempted mutation of a frozen object."""

    def __init__(self, name: str, action: str = "set", **kwargs) -> None:
        super().__init__(
            message=f"cannot {action} property '{name}' of a frozen object",
            code=ValijaErrorCodes.FROZEN_OBJECT,
            **kwargs,
        )
        self.name = name
        self.with_hint(
            "Patch the value seen through the runtime's read/set, "
            "not the frozen original"
        )


# ───────────────────────────────────────────────────────────────────────────────
# LOOKUP FAILURES
# ───────────────────────────────────────────────────────────────────────────────

class ValijaReferenceError(ValijaError, NameError):
    """A name is not reachable in the outer binding environment."""

    def __init__(self, name: str, **kwargs) -> None:
        super().__init__(
            message=f"not found: {name}",
            code=ValijaErrorCodes.UNDEFINED_NAME,
            **kwargs,
        )
        self.name = name


# ───────────────────────────────────────────────────────────────────────────────
# CONFIGURATION / INTERNAL
# ───────────────────────────────────────────────────────────────────────────────

class ConfigurationError(ValijaError, ValueError):
    """Invalid runtime or mitigator configuration."""

    def __init__(self, message: str, code: Optional[ErrorCode] = None, **kwargs) -> None:
        super().__init__(
            message=message,
            code=code or ValijaErrorCodes.BAD_OPTION,
            **kwargs,
        )


class InternalError(ValijaError):
    """A runtime invariant was broken. Indicates a bug in valija itself."""

    def __init__(self, message: str, code: Optional[ErrorCode] = None, **kwargs) -> None:
        super().__init__(
            message=message,
            code=code or ValijaErrorCodes.INTERNAL_ERROR,
            **kwargs,
        )
