"""Tests for YamlConfigProvider — namespace files under config_path."""

import pytest

from nudge.core.errors import ConfigurationInvalidError
from nudge.core.notification_config import load_notification_config
from nudge.infrastructure.config_provider import YamlConfigProvider


def test_reads_namespace_file(tmp_path):
    (tmp_path / "notification.yml").write_text("enabled: false\nmax_pending_per_user: 3\n")
    config = YamlConfigProvider(str(tmp_path)).get_config("notification")
    assert config == {"enabled": False, "max_pending_per_user": 3}


def test_yaml_extension_also_found(tmp_path):
    (tmp_path / "notification.yaml").write_text("enabled: true\n")
    assert YamlConfigProvider(str(tmp_path)).get_config("notification") == {"enabled": True}


def test_missing_file_is_empty(tmp_path):
    assert YamlConfigProvider(str(tmp_path)).get_config("notification") == {}


def test_empty_file_is_empty(tmp_path):
    (tmp_path / "notification.yml").write_text("")
    assert YamlConfigProvider(str(tmp_path)).get_config("notification") == {}


def test_non_mapping_is_invalid(tmp_path):
    (tmp_path / "notification.yml").write_text("- just\n- a list\n")
    with pytest.raises(ConfigurationInvalidError):
        YamlConfigProvider(str(tmp_path)).get_config("notification")


def test_broken_yaml_is_invalid(tmp_path):
    (tmp_path / "notification.yml").write_text("triggers: [unclosed\n")
    with pytest.raises(ConfigurationInvalidError):
        YamlConfigProvider(str(tmp_path)).get_config("notification")


def test_namespace_parsed_once(tmp_path):
    path = tmp_path / "notification.yml"
    path.write_text("enabled: true\n")
    provider = YamlConfigProvider(str(tmp_path))
    provider.get_config("notification")
    path.write_text("enabled: false\n")
    assert provider.get_config("notification") == {"enabled": True}


def test_shipped_policy_loads(request):
    config_dir = request.config.rootpath / "config"
    raw = YamlConfigProvider(str(config_dir)).get_config("notification")
    config = load_notification_config(raw)
    assert set(config.triggers) == {"match_queue", "pre_game", "role_retention"}
    assert config.timeout_seconds["match_queue"] == 300
    assert config.keywords_for("role_retention") == ["!active"]
