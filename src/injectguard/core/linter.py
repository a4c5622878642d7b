import dataclasses
import logging
from typing import Any

from injectguard.checks.base import CheckRegistry, create_default_registry
from injectguard.core.config import InjectguardConfig
from injectguard.core.context import DiagnosticCallback, RuleContext
from injectguard.core.diagnostic import Diagnostic, LintError
from injectguard.core.trace import Tracer
from injectguard.tree.estree import decode
from injectguard.tree.nodes import Node, iter_classes
from injectguard.tree.scope import FunctionScopeManager, ScopeManager

logger = logging.getLogger("injectguard")


def lint(
    tree: Node | dict[str, Any],
    source: str,
    *,
    filename: str = "<input>",
    config: InjectguardConfig | None = None,
    strict: bool = False,
    on_report: DiagnosticCallback | None = None,
    exclude_rules: set[str] | None = None,
    registry: CheckRegistry | None = None,
    tracer: Tracer | None = None,
    scope_manager: ScopeManager | None = None,
) -> list[Diagnostic]:
    """Run all checks on every class declaration in *tree*.

    Args:
        tree: Decoded tree, or raw ESTree JSON (decoded on the fly).
        source: Source text the tree was parsed from; used for positions.
        filename: Name attached to each diagnostic.
        config: Rule filter settings. Defaults to ``InjectguardConfig()``.
        strict: If True, raise LintError when any diagnostic is reported.
        on_report: Optional callback for each diagnostic (called in real-time).
        exclude_rules: Extra rule IDs to suppress on top of
                       ``config.exclude_rules``.
        registry: Custom check registry. Uses defaults if None.
        tracer: Trace sink. Built from ``INJECTGUARD_LOGGING`` if None.
        scope_manager: Scope resolver for method bodies.

    Returns:
        Diagnostics in report order.

    Example::

        from injectguard import lint

        diagnostics = lint(estree_json, source, filename="app.service.ts")

    """
    _config = config or InjectguardConfig()

    if exclude_rules:
        _config = dataclasses.replace(
            _config, exclude_rules=_config.exclude_rules | frozenset(exclude_rules)
        )

    if registry is None:
        registry = create_default_registry()

    program = decode(tree) if isinstance(tree, dict) else tree

    ctx = RuleContext(
        source,
        filename=filename,
        config=_config,
        tracer=tracer if tracer is not None else Tracer.from_env(),
        scope_manager=scope_manager or FunctionScopeManager(),
        _on_report=on_report,
    )
    checks = registry.get_checks(_config)

    for node in iter_classes(program):
        for check in checks:
            try:
                check.check_class(ctx, node)
            except Exception:
                logger.exception(
                    "Check %s.check_class() raised on class %s", type(check).__name__, node.name
                )

    for d in ctx.diagnostics:
        logger.debug(
            "[%s] %s %s:%d:%d: %s",
            d.rule_id,
            d.severity,
            d.filename,
            d.line,
            d.column,
            d.message,
        )

    if strict and ctx.diagnostics:
        raise LintError(ctx.diagnostics)

    return ctx.diagnostics
