"""Optional trace sink for per-class analysis events."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

TRACE_ENV_VAR = "INJECTGUARD_LOGGING"


def _trace_logger() -> logging.Logger:
    return logging.getLogger("injectguard.trace")


@dataclass(frozen=True, slots=True)
class Tracer:
    """Forwards analysis trace events to a logger unless disabled.

    Checks receive a tracer from the lint entry point instead of reading the
    environment themselves, so tests can pass :data:`NULL_TRACER` or a
    tracer bound to their own logger.
    """

    enabled: bool = True
    logger: logging.Logger = field(default_factory=_trace_logger)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Tracer:
        """Build a tracer from ``INJECTGUARD_LOGGING``; ``"off"`` disables it."""
        env = os.environ if environ is None else environ
        return cls(enabled=env.get(TRACE_ENV_VAR) != "off")

    def event(self, msg: str, *args: Any) -> None:
        if self.enabled:
            self.logger.debug(msg, *args)

    def error(self, msg: str, *args: Any) -> None:
        if self.enabled:
            self.logger.error(msg, *args)


NULL_TRACER = Tracer(enabled=False)
