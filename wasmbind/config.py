"""Configuration for the binding compiler.

Settings come from dataclass defaults, then an optional YAML file, then
environment variables. A ``.env`` file in the working directory is loaded
via python-dotenv before the environment is read.

Example ``wasmbind.yaml``::

    log_level: DEBUG
    parse:
      export_macro: HAKO_EXPORT
      reserved_exports: [malloc, free]
    csharp:
      namespace: HakoJS.Host
      class_name: HakoRegistry
    toolchain:
      objdump: /opt/wabt/bin/wasm-objdump
"""

import logging
import os
from dataclasses import dataclass, field, fields
from typing import Any, Optional

import yaml
from dotenv import find_dotenv, load_dotenv

from .errors import ConfigValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = 'wasmbind.yaml'


@dataclass
class ParseConfig:
    """Settings for the dump and header parsers"""
    export_macro: str = 'HAKO_EXPORT'
    doc_marker: str = '//!'
    reserved_exports: list[str] = field(default_factory=lambda: ['malloc', 'free'])


@dataclass
class CSharpConfig:
    """Settings for the C# emitter"""
    namespace: str = 'HakoJS.Host'
    class_name: str = 'HakoRegistry'
    usings: list[str] = field(default_factory=lambda: ['HakoJS.Backend.Core'])
    instance_type: str = 'WasmInstance'
    dispatcher: str = 'Hako.Dispatcher.Invoke'
    name_prefix: str = 'HAKO_'
    product_name: str = 'Hako'


@dataclass
class ToolchainConfig:
    """External executables"""
    objdump: str = 'wasm-objdump'
    git: str = 'git'


@dataclass
class BindgenConfig:
    """Complete configuration"""
    log_level: str = 'INFO'
    parse: ParseConfig = field(default_factory=ParseConfig)
    csharp: CSharpConfig = field(default_factory=CSharpConfig)
    toolchain: ToolchainConfig = field(default_factory=ToolchainConfig)

    @property
    def log_level_value(self) -> int:
        return resolve_log_level(self.log_level)


def resolve_log_level(name: str) -> int:
    """Convert a level name such as "DEBUG" to its numeric value"""
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ConfigValidationError(f"Unknown log level: {name}")
    return level


SECTIONS = {
    'parse': ParseConfig,
    'csharp': CSharpConfig,
    'toolchain': ToolchainConfig,
}


def load_config_file(path: str) -> dict[str, Any]:
    """Read a YAML config file into a mapping"""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            payload = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigValidationError(f"Cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Failed to parse config YAML at {path}: {exc}") from exc

    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ConfigValidationError(
            f"Unexpected config payload type in {path}: {type(payload).__name__}"
        )
    return payload


def _build_section(cls: type, data: Any, section: str):
    if data is None:
        return cls()
    if not isinstance(data, dict):
        raise ConfigValidationError(f"Config section '{section}' must be a mapping")

    known = {f.name: f for f in fields(cls)}
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise ConfigValidationError(
            f"Unknown keys in config section '{section}': {', '.join(unknown)}"
        )

    defaults = cls()
    for name, value in data.items():
        expected = type(getattr(defaults, name))
        if expected is list:
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigValidationError(f"{section}.{name} must be a list of strings")
        elif not isinstance(value, str):
            raise ConfigValidationError(f"{section}.{name} must be a string")
    return cls(**data)


def config_from_dict(data: dict[str, Any]) -> BindgenConfig:
    """Build a configuration from a parsed YAML mapping"""
    unknown = sorted(set(data) - set(SECTIONS) - {'log_level'})
    if unknown:
        raise ConfigValidationError(f"Unknown config keys: {', '.join(unknown)}")

    config = BindgenConfig(**{
        name: _build_section(cls, data.get(name), name)
        for name, cls in SECTIONS.items()
    })
    if 'log_level' in data:
        if not isinstance(data['log_level'], str):
            raise ConfigValidationError("log_level must be a string")
        config.log_level = data['log_level']
    return config


def apply_env_overrides(config: BindgenConfig) -> BindgenConfig:
    """Apply WASMBIND_* environment variables"""
    level = os.getenv('WASMBIND_LOG_LEVEL')
    if level:
        config.log_level = level
    objdump = os.getenv('WASMBIND_OBJDUMP')
    if objdump:
        config.toolchain.objdump = objdump
    return config


def load_config(path: Optional[str] = None) -> BindgenConfig:
    """Load configuration from path, or from wasmbind.yaml when present"""
    load_dotenv(find_dotenv(usecwd=True))

    if path is None and os.path.isfile(DEFAULT_CONFIG_FILE):
        path = DEFAULT_CONFIG_FILE

    if path is None:
        config = BindgenConfig()
    else:
        logger.debug("Loading config from %s", path)
        config = config_from_dict(load_config_file(path))

    config = apply_env_overrides(config)
    resolve_log_level(config.log_level)
    return config
