from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from injectguard.core.config import InjectguardConfig
from injectguard.core.diagnostic import Diagnostic, Fix
from injectguard.core.rule import Rule
from injectguard.core.trace import Tracer
from injectguard.tree.nodes import Node, node_type
from injectguard.tree.scope import FunctionScopeManager, ScopeManager

DiagnosticCallback: TypeAlias = Callable[[Diagnostic], Any]


@dataclass
class RuleContext:
    """Collects diagnostics for a single linted file.

    Each call to :func:`~injectguard.core.linter.lint` gets its own context.
    Checks read the source, config, tracer and scope manager from it and
    report findings through :meth:`report`.
    """

    source: str
    filename: str = "<input>"

    config: InjectguardConfig = field(default_factory=InjectguardConfig)
    tracer: Tracer = field(default_factory=Tracer)
    scope_manager: ScopeManager = field(default_factory=FunctionScopeManager)

    diagnostics: list[Diagnostic] = field(default_factory=list)

    _on_report: DiagnosticCallback | None = None
    _index: list[int] | None = field(init=False, repr=False, default=None)

    def __post_init__(self) -> None:
        self._index = _utf16_index(self.source)

    def report(
        self,
        rule: Rule,
        node: Node,
        message: str = "",
        *,
        message_id: str = "",
        fix: Fix | None = None,
    ) -> None:
        """Record a diagnostic anchored at *node*.

        Args:
            rule: The Rule being reported.
            node: Anchor node; its start offset gives the line and column.
            message: Message text. Falls back to ``rule.summary`` when empty.
            message_id: Stable identifier of the message template.
            fix: Optional insertion fix, its offset counted like node spans.

        """
        if not self.config.allows(rule):
            return

        offset = self.source_index(node.span[0])
        line, column = self.position(offset)
        d = Diagnostic(
            rule_id=rule.id,
            severity=rule.severity,
            message=message or rule.summary,
            message_id=message_id,
            hint=rule.hint,
            filename=self.filename,
            node_type=node_type(node),
            offset=offset,
            line=line,
            column=column,
            fix=(
                Fix(self.source_index(fix.offset), fix.text)
                if fix is not None and rule.fixable
                else None
            ),
        )
        self.diagnostics.append(d)

        if self._on_report is not None:
            self._on_report(d)

    def source_index(self, offset: int) -> int:
        """Index into the source of a tree offset.

        ESTree offsets count UTF-16 code units; characters above U+FFFF take
        two of them but only one Python string index.
        """
        if self._index is None:
            return offset
        if 0 <= offset < len(self._index):
            return self._index[offset]
        return offset - (len(self._index) - 1 - len(self.source))

    def position(self, offset: int) -> tuple[int, int]:
        """1-based ``(line, column)`` of *offset* in the source."""
        offset = max(0, min(offset, len(self.source)))
        line = self.source.count("\n", 0, offset) + 1
        column = offset - (self.source.rfind("\n", 0, offset) + 1) + 1
        return line, column


def _utf16_index(source: str) -> list[int] | None:
    """Source index for each UTF-16 offset, or ``None`` when the two agree."""
    if not source or max(source) <= "\uffff":
        return None
    index: list[int] = []
    for i, char in enumerate(source):
        index.append(i)
        if char > "\uffff":
            index.append(i)
    index.append(len(source))
    return index
