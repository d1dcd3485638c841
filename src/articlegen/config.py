from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Mapping

import yaml


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class SiteConfig:
    base_url: str
    href_prefix: str
    default_status: str
    default_language: dict[str, Any]


@dataclass(frozen=True)
class FirecrawlConfig:
    api_key: str
    base_url: str
    timeout_seconds: int
    research_credits: int
    agent_credits: int


@dataclass(frozen=True)
class JobsConfig:
    poll_interval_seconds: float
    agent_poll_seconds: float
    agent_max_wait_seconds: float


@dataclass(frozen=True)
class DatabaseConfig:
    url: str
    data_dir: str


@dataclass(frozen=True)
class Config:
    site: SiteConfig
    firecrawl: FirecrawlConfig
    jobs: JobsConfig
    database: DatabaseConfig


DEFAULT_CONFIG: dict[str, Any] = {
    "site": {
        "base_url": "https://houses-for-sale.co.il",
        "href_prefix": "/blog/",
        "default_status": "draft",
        "default_language": {
            "code": "he",
            "locale": "he-IL",
            "direction": "rtl",
            "isRTL": True,
        },
    },
    "firecrawl": {
        "api_key": "",
        "base_url": "https://api.firecrawl.dev",
        "timeout_seconds": 60,
        "research_credits": 120,
        "agent_credits": 180,
    },
    "jobs": {
        "poll_interval_seconds": 5.0,
        "agent_poll_seconds": 2.0,
        "agent_max_wait_seconds": 720.0,
    },
    "database": {
        "url": "",
        "data_dir": "/data",
    },
}

# env var -> (section, key, cast)
ENV_OVERRIDES: dict[str, tuple[str, str, type]] = {
    "AG_FIRECRAWL_API_KEY": ("firecrawl", "api_key", str),
    "AG_FIRECRAWL_BASE_URL": ("firecrawl", "base_url", str),
    "AG_RESEARCH_CREDITS": ("firecrawl", "research_credits", int),
    "AG_AGENT_CREDITS": ("firecrawl", "agent_credits", int),
    "AG_SITE_BASE_URL": ("site", "base_url", str),
    "AG_POLL_INTERVAL_SECONDS": ("jobs", "poll_interval_seconds", float),
    "AG_AGENT_POLL_SECONDS": ("jobs", "agent_poll_seconds", float),
    "AG_AGENT_MAX_WAIT_SECONDS": ("jobs", "agent_max_wait_seconds", float),
    "AG_DB_URL": ("database", "url", str),
    "AG_DATA_DIR": ("database", "data_dir", str),
}


def load_config(
    path: str | None = None, environ: Mapping[str, str] | None = None
) -> Config:
    """Build the process configuration: defaults, then YAML file, then env.

    Raises ConfigError listing every problem found, including a missing
    Firecrawl API key.
    """
    env = os.environ if environ is None else environ
    cfg = _deep_copy(DEFAULT_CONFIG)
    path = path or env.get("AG_CONFIG_FILE") or None
    if path:
        _deep_merge(cfg, _read_config_file(path))
    _apply_env_overrides(cfg, env)
    errors = validate_config(cfg)
    if errors:
        raise ConfigError("Invalid config: " + "; ".join(errors))
    config = _build_config(cfg)
    if not config.firecrawl.api_key:
        raise ConfigError("Missing env var: AG_FIRECRAWL_API_KEY")
    return config


def get_state_db_path(config: Config) -> str:
    return os.path.join(config.database.data_dir, "articlegen.sqlite3")


def validate_config(cfg: dict[str, Any]) -> list[str]:
    errors: list[str] = []
    _validate_dict(cfg, DEFAULT_CONFIG, "config", errors)
    return errors


def _read_config_file(path: str) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping")
    return data


def _apply_env_overrides(cfg: dict[str, Any], env: Mapping[str, str]) -> None:
    for name, (section, key, cast) in ENV_OVERRIDES.items():
        raw = env.get(name)
        if raw is None or raw.strip() == "":
            continue
        try:
            value = cast(raw.strip())
        except ValueError as exc:
            raise ConfigError(f"{name} must be {cast.__name__}: {raw!r}") from exc
        cfg.setdefault(section, {})[key] = value


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> None:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def _validate_dict(value: dict[str, Any], schema: dict[str, Any], path: str, errors: list[str]) -> None:
    if not isinstance(value, dict):
        errors.append(f"{path} must be an object")
        return
    for key in schema.keys():
        if key not in value:
            errors.append(f"missing {path}.{key}")
    for key in value.keys():
        if key not in schema:
            errors.append(f"unknown {path}.{key}")
    for key, default in schema.items():
        if key not in value:
            continue
        _validate_value(value[key], default, f"{path}.{key}", errors)


def _validate_value(value: Any, default: Any, path: str, errors: list[str]) -> None:
    if isinstance(default, dict):
        if not isinstance(value, dict):
            errors.append(f"{path} must be an object")
            return
        _validate_dict(value, default, path, errors)
        return
    if isinstance(default, bool):
        if not isinstance(value, bool):
            errors.append(f"{path} must be a boolean")
        return
    if isinstance(default, int):
        if not isinstance(value, int) or isinstance(value, bool):
            errors.append(f"{path} must be an integer")
        return
    if isinstance(default, float):
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            errors.append(f"{path} must be a number")
        elif value <= 0:
            errors.append(f"{path} must be positive")
        return
    if isinstance(default, str):
        if not isinstance(value, str):
            errors.append(f"{path} must be a string")
        return


def _build_config(cfg: dict[str, Any]) -> Config:
    site_cfg = cfg["site"]
    firecrawl_cfg = cfg["firecrawl"]
    jobs_cfg = cfg["jobs"]
    database_cfg = cfg["database"]

    site = SiteConfig(
        base_url=str(site_cfg["base_url"]).rstrip("/"),
        href_prefix=str(site_cfg["href_prefix"]),
        default_status=str(site_cfg["default_status"]),
        default_language=dict(site_cfg["default_language"]),
    )
    firecrawl = FirecrawlConfig(
        api_key=str(firecrawl_cfg["api_key"]),
        base_url=str(firecrawl_cfg["base_url"]).rstrip("/"),
        timeout_seconds=int(firecrawl_cfg["timeout_seconds"]),
        research_credits=int(firecrawl_cfg["research_credits"]),
        agent_credits=int(firecrawl_cfg["agent_credits"]),
    )
    jobs = JobsConfig(
        poll_interval_seconds=float(jobs_cfg["poll_interval_seconds"]),
        agent_poll_seconds=float(jobs_cfg["agent_poll_seconds"]),
        agent_max_wait_seconds=float(jobs_cfg["agent_max_wait_seconds"]),
    )
    database = DatabaseConfig(
        url=str(database_cfg["url"]),
        data_dir=str(database_cfg["data_dir"]),
    )
    return Config(site=site, firecrawl=firecrawl, jobs=jobs, database=database)


def _deep_copy(value: dict[str, Any]) -> dict[str, Any]:
    return json.loads(json.dumps(value))
