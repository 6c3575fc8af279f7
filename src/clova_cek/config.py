from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

from .model import DEFAULT_LANG, DEFAULT_VERSION, SUPPORTED_LANGS, Lang

# Environment variable names for response defaults
ENV_VERSION = "CLOVA_RESPONSE_VERSION"
ENV_DEFAULT_LANG = "CLOVA_DEFAULT_LANG"

LOCAL_CONFIG_NAME = Path(".clova") / "clova.toml"
HOME_CONFIG_PATH = Path.home() / ".clova" / "clova.toml"


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class ClovaConfig:
    version: str = DEFAULT_VERSION
    default_lang: Lang = DEFAULT_LANG


def _config_candidates() -> list[Path]:
    candidates = [Path.cwd() / LOCAL_CONFIG_NAME, HOME_CONFIG_PATH]
    if candidates[0] == candidates[1]:
        return [candidates[0]]
    return candidates


def _read_config(cfg_path: Path) -> dict:
    try:
        raw = cfg_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"Missing config file {cfg_path}.") from None
    except OSError as e:
        raise ConfigError(f"Failed to read config file {cfg_path}: {e}") from e
    try:
        return tomllib.loads(raw)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Malformed TOML in {cfg_path}: {e}") from None


def read_config(path: str | Path | None = None) -> tuple[dict, Path | None]:
    """Read the raw TOML table.

    An explicit path must exist. Otherwise the local then home config is used,
    and an empty table is returned when neither exists.
    """
    if path:
        cfg_path = Path(path).expanduser()
        return _read_config(cfg_path), cfg_path

    for candidate in _config_candidates():
        if candidate.is_file():
            return _read_config(candidate), candidate
    return {}, None


def _source(config_path: Path | None) -> str:
    return str(config_path) if config_path is not None else "defaults"


def _response_table(config: dict, config_path: Path | None) -> dict:
    table = config.get("response") or {}
    if not isinstance(table, dict):
        raise ConfigError(
            f"Invalid `response` in {_source(config_path)}; expected a table."
        )
    return table


def get_version(config: dict, config_path: Path | None) -> str:
    """Get the response version from environment variable or config file.

    Environment variable CLOVA_RESPONSE_VERSION takes precedence over config file.
    """
    env_version = os.environ.get(ENV_VERSION)
    if env_version and env_version.strip():
        return env_version.strip()

    value = _response_table(config, config_path).get("version", DEFAULT_VERSION)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(
            f"Invalid `response.version` in {_source(config_path)}; "
            "expected a non-empty string."
        )
    return value.strip()


def get_default_lang(config: dict, config_path: Path | None) -> Lang:
    """Get the default speech language from environment variable or config file.

    Environment variable CLOVA_DEFAULT_LANG takes precedence over config file.
    """
    available = ", ".join(sorted(SUPPORTED_LANGS))
    env_lang = os.environ.get(ENV_DEFAULT_LANG)
    if env_lang and env_lang.strip():
        lang = env_lang.strip()
        if lang not in SUPPORTED_LANGS:
            raise ConfigError(
                f"Invalid {ENV_DEFAULT_LANG} environment variable {lang!r}; "
                f"expected one of: {available}."
            )
        return lang  # type: ignore[return-value]

    value = _response_table(config, config_path).get("default_lang", DEFAULT_LANG)
    if not isinstance(value, str) or value not in SUPPORTED_LANGS:
        raise ConfigError(
            f"Invalid `response.default_lang` in {_source(config_path)}; "
            f"expected one of: {available}."
        )
    return value


def load_config(path: str | Path | None = None) -> tuple[ClovaConfig, Path | None]:
    config, config_path = read_config(path)
    return (
        ClovaConfig(
            version=get_version(config, config_path),
            default_lang=get_default_lang(config, config_path),
        ),
        config_path,
    )
