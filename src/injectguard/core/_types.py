from enum import StrEnum
from typing import TypeAlias

Span: TypeAlias = tuple[int, int]


class Severity(StrEnum):
    """Diagnostic severity levels (ordered lowest → highest)."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


SEVERITY_LEVEL: dict[Severity, int] = {
    Severity.INFO: 0,
    Severity.WARNING: 1,
    Severity.ERROR: 2,
}


class Accessibility(StrEnum):
    """TypeScript member accessibility modifiers."""

    PRIVATE = "private"
    PROTECTED = "protected"
    PUBLIC = "public"
    NONE = ""


class MethodKind(StrEnum):
    """ESTree ``MethodDefinition.kind`` values."""

    CONSTRUCTOR = "constructor"
    METHOD = "method"
    GET = "get"
    SET = "set"


class CandidateKind(StrEnum):
    """Where a readonly candidate was declared."""

    PARAMETER_PROPERTY = "parameter_property"
    CLASS_FIELD = "class_field"
