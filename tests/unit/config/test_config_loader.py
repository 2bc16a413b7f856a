"""Unit tests for configuration loading."""

import pytest

from klarity.config import AssistantConfig, ConfigLoader, load_config
from klarity.core.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("KLARITY_CONFIG", raising=False)
    monkeypatch.delenv("KLARITY_LOG_LEVEL", raising=False)


def write_config(directory, text: str):
    path = directory / "klarity.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults():
    config = AssistantConfig()

    assert config.graph.max_steps == 25
    assert config.graph.node_timeout_seconds == 30.0
    assert config.memory.max_messages == 50
    assert config.duration_for("private") == 90
    assert config.duration_for("group") == 60
    assert config.duration_for(None) == 60


def test_load_file(tmp_path):
    path = write_config(
        tmp_path,
        """
graph:
  max_steps: 10
  node_timeout_seconds: 5
booking:
  session_durations:
    group: 45
logging:
  level: DEBUG
""",
    )

    config = ConfigLoader.load(path)

    assert config.graph.max_steps == 10
    assert config.graph.node_timeout_seconds == 5.0
    assert config.duration_for("group") == 45
    assert config.logging.level == "DEBUG"


def test_load_directory(tmp_path):
    write_config(tmp_path, "memory:\n  max_messages: 10\n")

    assert ConfigLoader.load(tmp_path).memory.max_messages == 10


def test_empty_file_gives_defaults(tmp_path):
    assert ConfigLoader.load(write_config(tmp_path, "")) == AssistantConfig()


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        ConfigLoader.load(tmp_path / "nope.yaml")


def test_invalid_yaml(tmp_path):
    with pytest.raises(ConfigError, match="Invalid YAML"):
        ConfigLoader.load(write_config(tmp_path, "graph: [unclosed"))


def test_non_mapping_root(tmp_path):
    with pytest.raises(ConfigError, match="mapping"):
        ConfigLoader.load(write_config(tmp_path, "- a\n- b\n"))


def test_invalid_values(tmp_path):
    with pytest.raises(ConfigError, match="Invalid configuration"):
        ConfigLoader.load(write_config(tmp_path, "graph:\n  max_steps: 1\n"))


def test_load_config_without_path_uses_defaults():
    assert load_config() == AssistantConfig()


def test_load_config_from_environment(tmp_path, monkeypatch):
    path = write_config(tmp_path, "graph:\n  max_steps: 7\n")
    monkeypatch.setenv("KLARITY_CONFIG", str(path))

    assert load_config().graph.max_steps == 7


def test_log_level_override_keeps_file(tmp_path, monkeypatch):
    path = write_config(tmp_path, "logging:\n  level: INFO\n  json_file: logs/klarity.json\n")
    monkeypatch.setenv("KLARITY_LOG_LEVEL", "debug")

    config = load_config(path)

    assert config.logging.level == "DEBUG"
    assert config.logging.json_file == "logs/klarity.json"


def test_invalid_log_level_override(monkeypatch):
    monkeypatch.setenv("KLARITY_LOG_LEVEL", "chatty")

    with pytest.raises(ConfigError, match="KLARITY_LOG_LEVEL"):
        load_config()
