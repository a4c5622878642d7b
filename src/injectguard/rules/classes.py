from injectguard.core._types import Severity
from injectguard.core.rule import Rule

_LAYER = "class.members"

RO_001 = Rule(
    "RO-001",
    Severity.WARNING,
    "Injected service properties should be readonly.",
    hint="Add the readonly modifier; the field is never reassigned after construction",
    layer=_LAYER,
    name="readonly-injected-services",
    fixable=True,
)
