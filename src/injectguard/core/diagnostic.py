from dataclasses import dataclass

from injectguard.core._types import Severity


@dataclass(frozen=True, slots=True)
class Fix:
    """Insert ``text`` at ``offset`` (immediately before the target node)."""

    offset: int
    text: str


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single finding reported by an injectguard check."""

    rule_id: str
    severity: Severity
    message: str
    message_id: str = ""
    hint: str = ""
    filename: str = ""
    node_type: str = ""
    offset: int = 0
    line: int = 0
    column: int = 0
    fix: Fix | None = None


class LintError(Exception):
    """Raised in strict mode when diagnostics are reported."""

    def __init__(self, diagnostics: list[Diagnostic]) -> None:
        self.diagnostics = diagnostics
        count = len(diagnostics)
        errors = sum(1 for d in diagnostics if d.severity == Severity.ERROR)
        super().__init__(f"Lint failed: {errors} errors in {count} diagnostics")
