from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from injectguard.cli._loader import LoadError, load_file
from injectguard.core._types import SEVERITY_LEVEL, Severity
from injectguard.core.fixes import FixError, apply_fixes, collect_fixes
from injectguard.core.linter import lint

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from injectguard.core.config import InjectguardConfig
    from injectguard.core.diagnostic import Diagnostic

logger = logging.getLogger("injectguard")


@dataclass
class CheckResult:
    filename: str
    diagnostics: list[Diagnostic] = field(default_factory=list)
    fixed: int = 0
    error: str | None = None


@dataclass
class CheckReport:
    results: list[CheckResult] = field(default_factory=list)

    @property
    def all_diagnostics(self) -> list[Diagnostic]:
        dd: list[Diagnostic] = []
        for r in self.results:
            dd.extend(r.diagnostics)
        return dd

    @property
    def errors(self) -> list[CheckResult]:
        return [r for r in self.results if r.error is not None]

    def filtered(self, min_severity: Severity) -> list[Diagnostic]:
        level = SEVERITY_LEVEL[min_severity]
        return [d for d in self.all_diagnostics if SEVERITY_LEVEL[d.severity] >= level]


def _write_source(path: Path, text: str) -> None:
    with path.open("w", encoding="utf-8", newline="") as f:
        f.write(text)


def _check_one(
    path: str,
    *,
    config: InjectguardConfig | None,
    exclude_rules: set[str] | None,
    fix: bool,
) -> CheckResult:
    try:
        loaded = load_file(path)
    except LoadError as exc:
        return CheckResult(filename=path, error=str(exc))

    result = CheckResult(filename=str(loaded.source_path))
    result.diagnostics = lint(
        loaded.tree,
        loaded.source,
        filename=result.filename,
        config=config,
        exclude_rules=exclude_rules,
    )

    if fix:
        fixes = collect_fixes(result.diagnostics)
        if fixes:
            try:
                fixed_source = apply_fixes(loaded.source, fixes)
            except FixError as exc:
                result.error = f"Could not apply fixes: {exc}"
                return result
            _write_source(loaded.source_path, fixed_source)
            logger.info("Applied %d fixes to %s", len(fixes), loaded.source_path)
            result.fixed = len(fixes)
            # The tree dump is stale now; only unfixable diagnostics remain.
            result.diagnostics = [d for d in result.diagnostics if d.fix is None]

    return result


def run_check(
    paths: Iterable[str],
    *,
    config: InjectguardConfig | None = None,
    exclude_rules: set[str] | None = None,
    fix: bool = False,
) -> CheckReport:
    """Lint each path and return a report.

    Each entry in ``paths`` is a source file (``foo.ts``) or its ESTree dump
    (``foo.ts.json``); both must exist.  With ``fix=True`` the fixes are
    written back to the source files.
    """
    report = CheckReport()
    for path in paths:
        report.results.append(
            _check_one(path, config=config, exclude_rules=exclude_rules, fix=fix)
        )
    return report
