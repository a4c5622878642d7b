"""Base check interface and registry."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from injectguard.core.config import InjectguardConfig
    from injectguard.core.context import RuleContext
    from injectguard.core.rule import Rule
    from injectguard.tree.nodes import ClassDeclaration


class BaseCheck:
    """Base class for all checks.

    Subclasses override :meth:`check_class`, which the linter calls once per
    class declaration with the file's :class:`RuleContext`.
    """

    rules: ClassVar[tuple[Rule, ...]] = ()

    def check_class(self, ctx: RuleContext, node: ClassDeclaration) -> None:
        """Analyse one class declaration. Called once per class."""


class CheckRegistry:
    """Ordered collection of checks run by the linter."""

    def __init__(self) -> None:
        self._checks: list[BaseCheck] = []

    def register(self, check: BaseCheck) -> None:
        self._checks.append(check)

    def get_checks(self, config: InjectguardConfig | None = None) -> list[BaseCheck]:
        """Checks with at least one rule allowed by *config* (all if ``None``)."""
        if config is None:
            return list(self._checks)
        return [c for c in self._checks if any(config.allows(r) for r in c.rules)]


def create_default_registry() -> CheckRegistry:
    """Create a registry with all built-in checks."""
    from injectguard.checks.readonly_services import ReadonlyServicesCheck

    registry = CheckRegistry()
    registry.register(ReadonlyServicesCheck())
    return registry
