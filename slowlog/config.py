"""Configuration: defaults <- YAML file <- environment variables <- CLI args."""

import logging
import os
from dataclasses import dataclass, fields

import yaml

from slowlog.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "SLOWLOG_CONFIG"

# field name -> environment variable
ENV_VARS = {
    "mysql_slow_log": "MYSQL_SLOW_LOG",
    "minimum_query_time": "MINIMUM_QUERY_TIME",
    "state_file": "SLOWLOG_STATE_FILE",
    "redis_url": "SLOWLOG_REDIS_URL",
    "memory_namespace": "SLOWLOG_NAMESPACE",
    "chunk_size": "SLOWLOG_CHUNK_SIZE",
    "log_level": "LOG_LEVEL",
}

OUTPUT_FORMATS = ("text", "json", "log")


@dataclass(frozen=True)
class Config:
    mysql_slow_log: str = "/var/log/mysql/mysql-slow.log"
    minimum_query_time: float = 0.0
    state_file: str = ".slowlog/state.json"
    redis_url: str | None = None
    memory_namespace: str = "slowlog"
    chunk_size: int = 8192
    output: str = "text"
    log_level: str = "INFO"


def load_yaml_config(path: str | None) -> dict:
    """Load overrides from a YAML file. Returns an empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from None

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level")
    logger.info("Loaded YAML config from %s", path)
    return data


def _to_float(name: str, value) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got {value!r}") from None
    if result < 0:
        raise ConfigError(f"{name} must not be negative, got {value!r}")
    return result


def _to_positive_int(name: str, value) -> int:
    try:
        result = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None
    if result <= 0:
        raise ConfigError(f"{name} must be positive, got {value!r}")
    return result


def _coerce(values: dict) -> dict:
    out = dict(values)
    if "minimum_query_time" in out:
        out["minimum_query_time"] = _to_float("minimum_query_time", out["minimum_query_time"])
    if "chunk_size" in out:
        out["chunk_size"] = _to_positive_int("chunk_size", out["chunk_size"])
    if "mysql_slow_log" in out and out["mysql_slow_log"] is not None:
        out["mysql_slow_log"] = str(out["mysql_slow_log"]).strip()
    if out.get("redis_url") == "":
        out["redis_url"] = None
    if "output" in out and out["output"] not in OUTPUT_FORMATS:
        raise ConfigError(f"output must be one of {', '.join(OUTPUT_FORMATS)}, got {out['output']!r}")
    if "log_level" in out:
        out["log_level"] = str(out["log_level"]).upper()
    return out


def load_config(cli_args=None, environ: dict | None = None) -> Config:
    """Build Config from the YAML file, env vars, and parsed CLI args.

    *cli_args* is an argparse namespace; attributes that are None are treated
    as not given.
    """
    env = os.environ if environ is None else environ
    known = {f.name for f in fields(Config)}

    yaml_path = getattr(cli_args, "config", None) or env.get(CONFIG_PATH_ENV)
    yaml_data = load_yaml_config(yaml_path)
    unknown = sorted(set(yaml_data) - known)
    if unknown:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))

    values = {k: v for k, v in yaml_data.items() if k in known}

    for name, var in ENV_VARS.items():
        if var in env:
            values[name] = env[var]

    if cli_args is not None:
        for name in known:
            value = getattr(cli_args, name, None)
            if value is not None:
                values[name] = value

    return Config(**_coerce(values))
