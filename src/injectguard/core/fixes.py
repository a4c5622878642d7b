from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from injectguard.core.diagnostic import Diagnostic, Fix


class FixError(ValueError):
    """Raised when a fix points outside the source text."""


def collect_fixes(diagnostics: Iterable[Diagnostic]) -> list[Fix]:
    """Fixes attached to *diagnostics*, in report order."""
    return [d.fix for d in diagnostics if d.fix is not None]


def apply_fixes(source: str, fixes: Iterable[Fix]) -> str:
    """Return *source* with every insertion applied.

    Fixes are insertions only, so any subset can be applied together.
    Insertions at the same offset keep their relative order.

    Raises:
        :class:`FixError`: If a fix offset is outside ``0..len(source)``.

    """
    ordered = sorted(enumerate(fixes), key=lambda item: (item[1].offset, item[0]))
    parts: list[str] = []
    cursor = 0
    for _, fix in ordered:
        if not 0 <= fix.offset <= len(source):
            raise FixError(f"Fix offset {fix.offset} outside source of length {len(source)}")
        parts.append(source[cursor : fix.offset])
        parts.append(fix.text)
        cursor = fix.offset
    parts.append(source[cursor:])
    return "".join(parts)
