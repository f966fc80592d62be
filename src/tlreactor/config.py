from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

CONFIG_NAME = "tlreactor.toml"
HOME_CONFIG_PATH = Path.home() / ".tlreactor" / CONFIG_NAME


class ConfigError(RuntimeError):
    pass


class ConfigMissingError(ConfigError):
    pass


@dataclass(frozen=True, slots=True)
class ReactorConfig:
    bot_token: str
    proxy: str | None = None
    verify_tls: bool = True
    debug: bool = False


def load_config(path: str | Path | None = None) -> tuple[dict, Path]:
    cfg_path = Path(path).expanduser() if path else HOME_CONFIG_PATH
    try:
        raw = cfg_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigMissingError(f"Missing config file {cfg_path}.") from None
    except OSError as e:
        raise ConfigError(f"Failed to read config file {cfg_path}: {e}") from e
    try:
        return tomllib.loads(raw), cfg_path
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Malformed TOML in {cfg_path}: {e}") from None


def get_bot_token(config: dict, config_path: Path) -> str:
    try:
        token = config["bot_token"]
    except KeyError:
        raise ConfigError(f"Missing `bot_token` in {config_path}.") from None
    if not isinstance(token, str) or not token.strip():
        raise ConfigError(
            f"Invalid `bot_token` in {config_path}; expected a non-empty string."
        )
    return token.strip()


def get_proxy(config: dict, config_path: Path) -> str | None:
    proxy = config.get("proxy")
    if proxy is None:
        return None
    if not isinstance(proxy, str):
        raise ConfigError(f"Invalid `proxy` in {config_path}; expected a string.")
    return proxy.strip() or None


def _get_bool(config: dict, config_path: Path, key: str, default: bool) -> bool:
    value = config.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"Invalid `{key}` in {config_path}; expected a boolean.")
    return value


def parse_config(config: dict, config_path: Path) -> ReactorConfig:
    return ReactorConfig(
        bot_token=get_bot_token(config, config_path),
        proxy=get_proxy(config, config_path),
        verify_tls=_get_bool(config, config_path, "verify_tls", True),
        debug=_get_bool(config, config_path, "debug", False),
    )
