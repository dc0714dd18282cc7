from pathlib import Path

import pytest
import yaml

from modwarden.configuration.app_configuration import AppConfig
from modwarden.configuration.trust_settings import TrustConfig


@pytest.fixture()
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "app_config.yml"


def test_app_config_reload_parses_yaml(config_path: Path, tmp_path: Path) -> None:
    config_payload = {
        "database": {"path": str(tmp_path / "store.db"), "timeout_seconds": 2.5},
        "maintenance": {"lock_sweep_seconds": 15},
        "moderation": {"max_warnings": 4, "mute_duration_ms": 120000, "max_messages": 6},
        "trust": {"base": 40, "warnPenalty": 8, "enabled": True},
    }
    config_path.write_text(yaml.safe_dump(config_payload), encoding="utf-8")

    config = AppConfig(config_path)

    assert config.get("maintenance") == {"lock_sweep_seconds": 15}
    assert config.database_path == (tmp_path / "store.db").resolve()
    assert config.store_timeout_seconds == pytest.approx(2.5)
    assert config.lock_sweep_interval == pytest.approx(15.0)

    moderation = config.moderation
    assert moderation.max_warnings == 4
    assert moderation.mute_duration_ms == 120_000
    assert moderation.max_messages == 6

    trust = config.trust
    assert trust.base == 40
    assert trust.warn_penalty == 8
    assert trust.mute_penalty == 15


def test_app_config_missing_file_returns_defaults(tmp_path: Path) -> None:
    config = AppConfig(tmp_path / "does_not_exist.yml")

    assert config.data == {}
    assert config.trust == TrustConfig()
    assert config.moderation.max_warnings == 3
    assert config.store_timeout_seconds is None
    assert config.lock_sweep_interval == 60.0
    assert config.database_path.name == "app.db"


def test_app_config_invalid_yaml_returns_empty(config_path: Path) -> None:
    config_path.write_text("trust: [unclosed", encoding="utf-8")

    config = AppConfig(config_path)

    assert config.data == {}


def test_app_config_non_mapping_sections_ignored(config_path: Path) -> None:
    config_path.write_text(
        yaml.safe_dump({"trust": "yes please", "database": {"timeout_seconds": -1}}),
        encoding="utf-8",
    )

    config = AppConfig(config_path)

    assert config.trust == TrustConfig()
    assert config.store_timeout_seconds is None


def test_app_config_reload_picks_up_changes(config_path: Path) -> None:
    config_path.write_text(yaml.safe_dump({"moderation": {"max_warnings": 2}}), encoding="utf-8")
    config = AppConfig(config_path)
    assert config.moderation.max_warnings == 2

    config_path.write_text(yaml.safe_dump({"moderation": {"max_warnings": 5}}), encoding="utf-8")
    config.reload()

    assert config.moderation.max_warnings == 5
