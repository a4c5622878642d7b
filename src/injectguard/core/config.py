from __future__ import annotations

import dataclasses
import fnmatch
import functools
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from injectguard.core._types import SEVERITY_LEVEL, Severity

if TYPE_CHECKING:
    from injectguard.core.rule import Rule


class ConfigError(ValueError):
    """Raised when a config file contains an invalid value."""


def _is_glob(pattern: str) -> bool:
    return any(c in pattern for c in "*?[")


@dataclass(frozen=True)
class InjectguardConfig:
    """Configuration for an injectguard lint run.

    Can be loaded from ``.injectguard.toml`` or
    ``pyproject.toml [tool.injectguard]`` via :func:`load_config`.

    Example ``pyproject.toml``::

        [tool.injectguard]
        profile = "recommended"
        service_marker = "service"
        exclude_rules = ["RO-*"]

    """

    # --- Rule filtering ---

    min_severity: Severity = Severity.INFO
    """Minimum severity to report. Rules below this are silently skipped."""

    include_rules: frozenset[str] = field(default_factory=frozenset)
    """Allowlist: if non-empty, only rules matching these patterns are active.
    Applied before ``exclude_rules``.

    Supports both exact IDs (``"RO-001"``) and glob patterns (``"RO-*"``).
    """

    exclude_rules: frozenset[str] = field(default_factory=frozenset)
    """Denylist: rule IDs to suppress. Applied after ``include_rules``.

    Supports both exact IDs (``"RO-001"``) and glob patterns (``"RO-*"``).
    """

    categories: frozenset[str] = field(default_factory=frozenset)
    """Layer prefixes to include (e.g. ``{"class"}``). Empty means all
    categories.

    Matching uses prefix logic: ``"class"`` matches any rule whose
    ``layer`` equals ``"class"`` or starts with ``"class."``.
    """

    # --- Readonly-services heuristic ---

    service_marker: str = "service"
    """RO-001: case-insensitive substring a ``this.<member>`` assignment must
    contain to count as a reassignment of an injected service."""

    # --- Pre-compiled lookups (not part of config equality or hash) ---

    _exact_include: frozenset[str] = field(
        default_factory=frozenset, init=False, compare=False, hash=False, repr=False
    )
    _glob_include: tuple[re.Pattern[str], ...] = field(
        default=(), init=False, compare=False, hash=False, repr=False
    )
    _exact_exclude: frozenset[str] = field(
        default_factory=frozenset, init=False, compare=False, hash=False, repr=False
    )
    _glob_exclude: tuple[re.Pattern[str], ...] = field(
        default=(), init=False, compare=False, hash=False, repr=False
    )

    def __post_init__(self) -> None:
        if not self.service_marker:
            raise ConfigError("service_marker must be a non-empty string")
        exact_inc = frozenset(p for p in self.include_rules if not _is_glob(p))
        glob_inc = tuple(
            re.compile(fnmatch.translate(p)) for p in self.include_rules if _is_glob(p)
        )
        exact_exc = frozenset(p for p in self.exclude_rules if not _is_glob(p))
        glob_exc = tuple(
            re.compile(fnmatch.translate(p)) for p in self.exclude_rules if _is_glob(p)
        )
        object.__setattr__(self, "_exact_include", exact_inc)
        object.__setattr__(self, "_glob_include", glob_inc)
        object.__setattr__(self, "_exact_exclude", exact_exc)
        object.__setattr__(self, "_glob_exclude", glob_exc)

    # Frozen and bounded by O(N_configs x N_rules) entries.
    @functools.cache  # noqa: B019
    def allows(self, rule: Rule) -> bool:
        """Return ``True`` if *rule* passes all active filters.

        Evaluation order:
        1. ``min_severity`` — rules below this level are excluded.
        2. ``categories`` — if non-empty, rule's layer must match a prefix.
        3. ``include_rules`` — if non-empty, rule ID must be in the allowlist.
        4. ``exclude_rules`` — rule ID must not be in the denylist.

        """
        if SEVERITY_LEVEL[rule.severity] < SEVERITY_LEVEL[self.min_severity]:
            return False

        if self.categories and not any(
            rule.layer == c or rule.layer.startswith(c + ".") for c in self.categories
        ):
            return False

        if self.include_rules and (
            rule.id not in self._exact_include
            and not any(p.match(rule.id) for p in self._glob_include)
        ):
            return False

        if rule.id in self._exact_exclude:
            return False

        return not any(p.match(rule.id) for p in self._glob_exclude)


BUILTIN_PROFILES: dict[str, InjectguardConfig] = {
    "strict": InjectguardConfig(),
    "recommended": InjectguardConfig(min_severity=Severity.WARNING),
    "minimal": InjectguardConfig(min_severity=Severity.ERROR),
}


def load_config(path: Path | str | None = None) -> InjectguardConfig:
    """Load :class:`InjectguardConfig` from a TOML file.

    When ``path`` is ``None``, walks up from the current directory looking for
    ``.injectguard.toml`` first, then ``pyproject.toml [tool.injectguard]``.
    A ``pyproject.toml`` without a ``[tool.injectguard]`` section acts as a
    project root marker and stops the search.

    Args:
        path: Explicit path to a config file (``.injectguard.toml``-style or
              ``pyproject.toml``).  If ``None``, auto-detects by walking up.

    Returns:
        :class:`InjectguardConfig` populated from the file, with defaults for
        any missing keys.

    Raises:
        :class:`ConfigError`: If the file contains an unrecognised value
            (e.g. ``profile = "typo"`` or ``min_severity = "extreme"``).

    """
    if path is not None:
        resolved = Path(path)
        data = _read_file(resolved) if resolved.exists() else {}
    else:
        data = _find_config()

    return _parse_config(data)


def _find_config() -> dict[str, Any]:
    """Walk up from CWD looking for a config file."""
    current = Path.cwd()
    while True:
        own_toml = current / ".injectguard.toml"
        if own_toml.exists():
            return _read_file(own_toml)

        pyproject = current / "pyproject.toml"
        if pyproject.exists():
            # pyproject.toml marks the project root: a parent project's
            # config must not leak in.
            return _read_file(pyproject)

        parent = current.parent
        if parent == current:
            break
        current = parent

    return {}


def _read_file(path: Path) -> dict[str, Any]:
    """Read a TOML file and return the injectguard-relevant section."""
    try:
        with path.open("rb") as f:
            raw: dict[str, Any] = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    if path.name == "pyproject.toml":
        tool: dict[str, Any] = raw.get("tool", {})
        section: dict[str, Any] = tool.get("injectguard", {})
        return section
    return raw


def _parse_config(data: dict[str, Any]) -> InjectguardConfig:
    """Parse raw key/value dict into :class:`InjectguardConfig`.

    If ``profile`` is present, the corresponding :data:`BUILTIN_PROFILES`
    entry is used as the base; explicit keys in *data* override it.

    Raises:
        :class:`ConfigError`: On unrecognised enum values, unknown profiles
            or an empty ``service_marker``.

    """
    if (profile_name := data.get("profile")) is not None:
        base = BUILTIN_PROFILES.get(str(profile_name))
        if base is None:
            known = ", ".join(f'"{p}"' for p in BUILTIN_PROFILES)
            raise ConfigError(f"Unknown profile {profile_name!r}. Known profiles: {known}")
    else:
        base = InjectguardConfig()

    kwargs: dict[str, Any] = {}
    try:
        if (v := data.get("min_severity")) is not None:
            kwargs["min_severity"] = Severity(v)
    except (ValueError, TypeError) as exc:
        raise ConfigError(str(exc)) from exc

    if (v := data.get("service_marker")) is not None:
        if not isinstance(v, str):
            raise ConfigError(f"service_marker must be a string, got {type(v).__name__}")
        kwargs["service_marker"] = v

    if isinstance(rules := data.get("include_rules"), list):
        kwargs["include_rules"] = frozenset(str(r) for r in rules)
    if isinstance(rules := data.get("exclude_rules"), list):
        kwargs["exclude_rules"] = frozenset(str(r) for r in rules)
    if isinstance(cats := data.get("categories"), list):
        kwargs["categories"] = frozenset(str(c) for c in cats)

    return dataclasses.replace(base, **kwargs)
