from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path

from injectguard.core._types import Severity
from injectguard.core.config import (
    BUILTIN_PROFILES,
    ConfigError,
    InjectguardConfig,
    _parse_config,
    load_config,
)
from injectguard.core.rule import Rule
from injectguard.rules.classes import RO_001

# Helpers

_INFO_RULE = Rule(id="X-001", severity=Severity.INFO, summary="info rule", layer="class.members")
_WARN_RULE = Rule(id="X-002", severity=Severity.WARNING, summary="warn rule", layer="module")
_ERR_RULE = Rule(id="X-003", severity=Severity.ERROR, summary="error rule", layer="class.fields")
_RO_RULE = Rule(id="RO-002", severity=Severity.WARNING, summary="ro rule", layer="class.members")


# InjectguardConfig defaults


def test_config_defaults() -> None:
    cfg = InjectguardConfig()
    assert cfg.min_severity == Severity.INFO
    assert cfg.include_rules == frozenset()
    assert cfg.exclude_rules == frozenset()
    assert cfg.categories == frozenset()
    assert cfg.service_marker == "service"


def test_empty_service_marker_rejected() -> None:
    with pytest.raises(ConfigError, match="service_marker"):
        InjectguardConfig(service_marker="")


# InjectguardConfig.allows(): severity filtering


def test_allows_passes_rule_at_min_severity() -> None:
    cfg = InjectguardConfig(min_severity=Severity.WARNING)
    assert cfg.allows(_WARN_RULE) is True


def test_allows_blocks_rule_below_min_severity() -> None:
    cfg = InjectguardConfig(min_severity=Severity.WARNING)
    assert cfg.allows(_INFO_RULE) is False
    assert cfg.allows(_ERR_RULE) is True


# InjectguardConfig.allows(): categories filtering


def test_allows_no_categories_passes_any_layer() -> None:
    cfg = InjectguardConfig()
    assert cfg.allows(_INFO_RULE) is True
    assert cfg.allows(_WARN_RULE) is True


def test_allows_exact_category_match() -> None:
    cfg = InjectguardConfig(categories=frozenset({"class.members"}))
    assert cfg.allows(_INFO_RULE) is True  # layer="class.members" — exact match
    assert cfg.allows(_ERR_RULE) is False  # layer="class.fields" — not matching


def test_allows_prefix_category_match() -> None:
    cfg = InjectguardConfig(categories=frozenset({"class"}))
    assert cfg.allows(_INFO_RULE) is True
    assert cfg.allows(_ERR_RULE) is True
    assert cfg.allows(_WARN_RULE) is False  # layer="module"


# InjectguardConfig.allows(): include / exclude


def test_allows_include_rules_allows_only_listed() -> None:
    cfg = InjectguardConfig(include_rules=frozenset({"X-001"}))
    assert cfg.allows(_INFO_RULE) is True
    assert cfg.allows(_ERR_RULE) is False


def test_allows_include_rules_glob_prefix() -> None:
    cfg = InjectguardConfig(include_rules=frozenset({"RO-*"}))
    assert cfg.allows(RO_001) is True
    assert cfg.allows(_RO_RULE) is True
    assert cfg.allows(_WARN_RULE) is False


def test_allows_exclude_rules_glob() -> None:
    cfg = InjectguardConfig(exclude_rules=frozenset({"X-*"}))
    assert cfg.allows(_INFO_RULE) is False
    assert cfg.allows(_ERR_RULE) is False
    assert cfg.allows(RO_001) is True


def test_allows_exclude_takes_precedence_over_include() -> None:
    cfg = InjectguardConfig(
        include_rules=frozenset({"RO-001"}),
        exclude_rules=frozenset({"RO-001"}),
    )
    assert cfg.allows(RO_001) is False


def test_config_is_frozen() -> None:
    cfg = InjectguardConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.service_marker = "repo"  # type: ignore[misc]


# BUILTIN_PROFILES


def test_profile_recommended_keeps_readonly_rule() -> None:
    cfg = BUILTIN_PROFILES["recommended"]
    assert cfg.allows(_INFO_RULE) is False
    assert cfg.allows(RO_001) is True


def test_profile_minimal_allows_only_errors() -> None:
    cfg = BUILTIN_PROFILES["minimal"]
    assert cfg.allows(RO_001) is False
    assert cfg.allows(_ERR_RULE) is True


# _parse_config


def test_parse_config_empty() -> None:
    assert _parse_config({}) == InjectguardConfig()


def test_parse_config_explicit_min_severity_overrides_profile() -> None:
    cfg = _parse_config({"profile": "recommended", "min_severity": "error"})
    assert cfg.min_severity == Severity.ERROR


def test_parse_config_lists() -> None:
    cfg = _parse_config(
        {
            "include_rules": ["RO-001"],
            "exclude_rules": ["X-*"],
            "categories": ["class"],
        }
    )
    assert cfg.include_rules == frozenset({"RO-001"})
    assert cfg.exclude_rules == frozenset({"X-*"})
    assert cfg.categories == frozenset({"class"})


def test_parse_config_non_list_ignored() -> None:
    cfg = _parse_config({"exclude_rules": "RO-001", "categories": "class"})
    assert cfg.exclude_rules == frozenset()
    assert cfg.categories == frozenset()


def test_parse_config_service_marker() -> None:
    assert _parse_config({"service_marker": "Repo"}).service_marker == "Repo"


@pytest.mark.parametrize(
    ("data", "match"),
    [
        pytest.param({"profile": "typo"}, "'typo'", id="profile"),
        pytest.param({"min_severity": "extreme"}, "'extreme'", id="severity"),
        pytest.param({"service_marker": 3}, "must be a string", id="marker-type"),
        pytest.param({"service_marker": ""}, "non-empty", id="marker-empty"),
    ],
)
def test_parse_config_invalid_raises_config_error(data: dict, match: str) -> None:
    with pytest.raises(ConfigError, match=match):
        _parse_config(data)


# load_config


def test_load_config_explicit_own_toml(tmp_path: Path) -> None:
    toml = tmp_path / ".injectguard.toml"
    toml.write_bytes(b'profile = "minimal"\nservice_marker = "client"\nexclude_rules = ["X-1"]\n')
    cfg = load_config(toml)
    assert cfg.min_severity == Severity.ERROR
    assert cfg.service_marker == "client"
    assert "X-1" in cfg.exclude_rules


def test_load_config_explicit_pyproject_toml(tmp_path: Path) -> None:
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_bytes(b'[tool.injectguard]\nprofile = "recommended"\n')
    assert load_config(pyproject).min_severity == Severity.WARNING


def test_load_config_nonexistent_path_returns_defaults(tmp_path: Path) -> None:
    assert load_config(tmp_path / "nonexistent.toml") == InjectguardConfig()


def test_load_config_malformed_toml_raises_config_error(tmp_path: Path) -> None:
    toml = tmp_path / ".injectguard.toml"
    toml.write_bytes(b"this is not valid toml ][[\n")
    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(toml)


def test_load_config_auto_detects_own_toml(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".injectguard.toml").write_bytes(b'profile = "recommended"\n')
    assert load_config().min_severity == Severity.WARNING


def test_load_config_own_toml_wins_over_pyproject(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".injectguard.toml").write_bytes(b'min_severity = "error"\n')
    (tmp_path / "pyproject.toml").write_bytes(b'[tool.injectguard]\nmin_severity = "warning"\n')
    assert load_config().min_severity == Severity.ERROR


def test_load_config_pyproject_stops_search(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / ".injectguard.toml").write_bytes(b'min_severity = "error"\n')
    child = tmp_path / "pkg"
    child.mkdir()
    (child / "pyproject.toml").write_bytes(b'[project]\nname = "pkg"\n')
    monkeypatch.chdir(child)
    assert load_config() == InjectguardConfig()


def test_load_config_walks_up(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".injectguard.toml").write_bytes(b'service_marker = "gateway"\n')
    child = tmp_path / "a" / "b"
    child.mkdir(parents=True)
    monkeypatch.chdir(child)
    assert load_config().service_marker == "gateway"
