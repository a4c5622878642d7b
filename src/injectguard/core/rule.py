from dataclasses import dataclass

from injectguard.core._types import Severity


@dataclass(frozen=True, slots=True)
class Rule:
    """Metadata for a single lint rule.

    Rule instances are pure data - they describe *what* a rule checks,
    not *how* to check it.  Checks reference Rule objects by import.

    Example::

        RO_001 = Rule(
            id="RO-001",
            severity=Severity.WARNING,
            summary="Injected service properties should be readonly.",
            name="readonly-injected-services",
            layer="class.members",
            fixable=True,
        )
    """

    id: str
    severity: Severity
    summary: str
    hint: str = ""
    layer: str = ""
    name: str = ""
    fixable: bool = False

    def __str__(self) -> str:
        return f"[{self.id}] {self.summary}"
