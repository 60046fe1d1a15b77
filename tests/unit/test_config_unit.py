import pytest

from threatscope.utils.config import get_config, init_config
from threatscope.utils.exceptions import ConfigurationError


def write_config(tmp_path, text):
    path = tmp_path / "custom.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults(default_config):
    assert default_config.config_path is None
    assert default_config.get("analysis.min_string_length") == 5
    assert default_config.get("analysis.allowed_extensions") == [".exe", ".dll"]
    assert default_config.get("logging.level") == "INFO"
    assert default_config.get("logging.file") is None


def test_get_config_returns_singleton(default_config):
    assert get_config() is default_config


def test_missing_keys_fall_back_to_default(default_config):
    assert default_config.get("analysis.nope", 42) == 42
    assert default_config.get("analysis.min_string_length.deeper", "x") == "x"


def test_yaml_file_is_merged_over_defaults(tmp_path):
    path = write_config(tmp_path, "analysis:\n  min_string_length: 8\nlogging:\n  format: json\n")
    config = init_config(path)
    assert config.config_path == path
    assert config.get("analysis.min_string_length") == 8
    assert config.get("analysis.workers") == 4
    assert config.get("logging.format") == "json"


def test_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("TS_MIN_STRING_LENGTH", "7")
    monkeypatch.setenv("TS_LOG_LEVEL", "DEBUG")
    config = init_config()
    assert config.get("analysis.min_string_length") == 7
    assert config.get("logging.level") == "DEBUG"


def test_env_override_must_convert(monkeypatch):
    monkeypatch.setenv("TS_MAX_FILE_SIZE", "huge")
    with pytest.raises(ConfigurationError):
        init_config()


def test_log_file_path_is_expanded(tmp_path, monkeypatch):
    monkeypatch.setenv("TS_LOG_FILE", "~/logs/ts.log")
    config = init_config()
    assert not config.get("logging.file").startswith("~")


def test_missing_explicit_file(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        init_config(tmp_path / "absent.yaml")


def test_invalid_yaml(tmp_path):
    path = write_config(tmp_path, "analysis: [unclosed\n")
    with pytest.raises(ConfigurationError, match="Invalid YAML"):
        init_config(path)


def test_non_mapping_yaml(tmp_path):
    path = write_config(tmp_path, "- just\n- a list\n")
    with pytest.raises(ConfigurationError):
        init_config(path)


@pytest.mark.parametrize("text, key", [
    ("analysis:\n  min_string_length: 0\n", "analysis.min_string_length"),
    ("analysis:\n  max_file_size: -1\n", "analysis.max_file_size"),
    ("analysis:\n  workers: zero\n", "analysis.workers"),
    ("analysis:\n  allowed_extensions: exe\n", "analysis.allowed_extensions"),
    ("logging:\n  format: xml\n", "logging.format"),
])
def test_invalid_values(tmp_path, text, key):
    with pytest.raises(ConfigurationError) as exc_info:
        init_config(write_config(tmp_path, text))
    assert exc_info.value.details["config_key"] == key


def test_set_creates_sections(default_config):
    default_config.set("extra.nested.value", 3)
    assert default_config.get_section("extra") == {"nested": {"value": 3}}
    assert "extra" in default_config.to_dict()
