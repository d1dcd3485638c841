import pytest
import yaml

from articlegen.config import DEFAULT_CONFIG, ConfigError, load_config, validate_config


def test_defaults_with_api_key():
    config = load_config(environ={"AG_FIRECRAWL_API_KEY": "fc-key"})
    assert config.firecrawl.api_key == "fc-key"
    assert config.site.base_url == "https://houses-for-sale.co.il"
    assert config.site.default_language["code"] == "he"
    assert config.site.default_status == "draft"
    assert config.jobs.poll_interval_seconds == 5.0
    assert config.jobs.agent_poll_seconds == 2.0
    assert config.jobs.agent_max_wait_seconds == 720.0
    assert config.firecrawl.research_credits == 120
    assert config.firecrawl.agent_credits == 180


def test_missing_api_key_is_fatal():
    with pytest.raises(ConfigError) as excinfo:
        load_config(environ={})
    assert "AG_FIRECRAWL_API_KEY" in str(excinfo.value)


def test_yaml_file_then_env_overrides(tmp_path):
    cfg_path = tmp_path / "articlegen.yml"
    cfg_path.write_text(
        yaml.safe_dump(
            {
                "site": {"base_url": "https://example.org/"},
                "jobs": {"agent_max_wait_seconds": 60},
                "firecrawl": {"api_key": "from-file"},
            }
        ),
        encoding="utf-8",
    )
    config = load_config(
        str(cfg_path),
        environ={"AG_AGENT_CREDITS": "90", "AG_POLL_INTERVAL_SECONDS": "1.5"},
    )
    assert config.site.base_url == "https://example.org"
    assert config.firecrawl.api_key == "from-file"
    assert config.firecrawl.agent_credits == 90
    assert config.jobs.agent_max_wait_seconds == 60.0
    assert config.jobs.poll_interval_seconds == 1.5


def test_config_file_from_env_var(tmp_path):
    cfg_path = tmp_path / "articlegen.yml"
    cfg_path.write_text(yaml.safe_dump({"firecrawl": {"api_key": "k"}}), encoding="utf-8")
    config = load_config(environ={"AG_CONFIG_FILE": str(cfg_path)})
    assert config.firecrawl.api_key == "k"


def test_invalid_file_reports_all_errors(tmp_path):
    cfg_path = tmp_path / "articlegen.yml"
    cfg_path.write_text(
        yaml.safe_dump({"site": {"colour": "blue"}, "jobs": {"poll_interval_seconds": "soon"}}),
        encoding="utf-8",
    )
    with pytest.raises(ConfigError) as excinfo:
        load_config(str(cfg_path), environ={"AG_FIRECRAWL_API_KEY": "k"})
    message = str(excinfo.value)
    assert "unknown config.site.colour" in message
    assert "config.jobs.poll_interval_seconds must be a number" in message


def test_bad_env_value_is_config_error():
    with pytest.raises(ConfigError):
        load_config(environ={"AG_FIRECRAWL_API_KEY": "k", "AG_AGENT_CREDITS": "lots"})


def test_default_config_validates_cleanly():
    assert validate_config(DEFAULT_CONFIG) == []
