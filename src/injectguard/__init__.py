from importlib.metadata import version

from injectguard.checks.base import BaseCheck, CheckRegistry
from injectguard.core._types import Severity
from injectguard.core.config import BUILTIN_PROFILES, ConfigError, InjectguardConfig
from injectguard.core.context import RuleContext
from injectguard.core.diagnostic import Diagnostic, Fix, LintError
from injectguard.core.fixes import apply_fixes
from injectguard.core.linter import lint
from injectguard.core.rule import Rule
from injectguard.core.trace import NULL_TRACER, Tracer

__version__ = version("injectguard")


__all__ = [
    "BUILTIN_PROFILES",
    "NULL_TRACER",
    "BaseCheck",
    "CheckRegistry",
    "ConfigError",
    "Diagnostic",
    "Fix",
    "InjectguardConfig",
    "LintError",
    "Rule",
    "RuleContext",
    "Severity",
    "Tracer",
    "__version__",
    "apply_fixes",
    "lint",
]
