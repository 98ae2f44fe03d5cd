from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Literal

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from restchain.core.exceptions import ConfigurationMissing

logger = structlog.get_logger(__name__)

BASE_URL_KEY = "base.url"
ENV_KEY = "env"
REQUIRED_KEYS = (BASE_URL_KEY, ENV_KEY)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_COMMENT_PREFIXES = ("#", "!")
_KEY_TERMINATORS = "=: \t\f"
_WHITESPACE = " \t\f"
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


class RunnerSettings(BaseSettings):
    """Process settings for the suite runner.

    All values can be overridden via environment variables. Prefix: ``RESTCHAIN_``.
    """

    config_file: Path = Field(default=Path("config/config.properties"))
    report_dir: Path = Field(default=Path("reports"))
    request_timeout: float = Field(default=30.0, gt=0, description="Per-request timeout in seconds.")
    log_level: LogLevel = Field(default="INFO")
    log_json_output: bool = Field(default=False)

    # Environment selection in CI without editing the properties file
    base_url: str | None = Field(default=None, description="Overrides base.url from the config file.")
    env: str | None = Field(default=None, description="Overrides env from the config file.")

    model_config = SettingsConfigDict(env_prefix="RESTCHAIN_", env_file=".env", extra="ignore")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


@lru_cache(maxsize=1)
def get_settings() -> RunnerSettings:
    return RunnerSettings()


class SuiteConfig(BaseModel):
    """Environment parameters for one suite run. Immutable once loaded."""

    model_config = ConfigDict(frozen=True)

    base_url: str
    env: str
    entries: tuple[tuple[str, str], ...] = Field(default=(), repr=False)

    @property
    def properties(self) -> Mapping[str, str]:
        """Read-only view of every key loaded from the source."""
        return MappingProxyType(dict(self.entries))

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.properties.get(key, default)

    @classmethod
    def from_properties(cls, properties: Mapping[str, str], source: str = "<memory>") -> SuiteConfig:
        """Build the config from a flat key/value mapping.

        Raises:
            ConfigurationMissing: If ``base.url`` or ``env`` is absent or blank.
        """
        for key in REQUIRED_KEYS:
            if not (properties.get(key) or "").strip():
                raise ConfigurationMissing(
                    message=f"Required configuration key '{key}' is missing",
                    details={"key": key, "source": source},
                )
        return cls(
            base_url=properties[BASE_URL_KEY].strip().rstrip("/"),
            env=properties[ENV_KEY].strip(),
            entries=tuple(properties.items()),
        )


def _logical_lines(text: str) -> list[str]:
    """Join ``\\``-continued lines and drop comments and blank lines."""
    lines: list[str] = []
    pending: str | None = None
    for raw_line in text.splitlines():
        line = raw_line.lstrip(_WHITESPACE)
        if pending is None:
            if not line or line.startswith(_COMMENT_PREFIXES):
                continue
            pending = line
        else:
            pending += line
        trailing = len(pending) - len(pending.rstrip("\\"))
        if trailing % 2 == 1:
            pending = pending[:-1]
            continue
        lines.append(pending)
        pending = None
    if pending is not None:
        lines.append(pending)
    return lines


def _unescape(text: str) -> str:
    chars: list[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char != "\\" or index + 1 == len(text):
            chars.append(char)
            index += 1
            continue
        escaped = text[index + 1]
        code = text[index + 2 : index + 6]
        if escaped == "u" and len(code) == 4 and all(c in "0123456789abcdefABCDEF" for c in code):
            chars.append(chr(int(code, 16)))
            index += 6
            continue
        chars.append(_ESCAPES.get(escaped, escaped))
        index += 2
    return "".join(chars)


def _split_entry(line: str) -> tuple[str, str]:
    index = 0
    while index < len(line) and line[index] not in _KEY_TERMINATORS:
        index += 2 if line[index] == "\\" else 1
    key = line[:index]

    rest = line[index:].lstrip(_WHITESPACE)
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip(_WHITESPACE)
    return _unescape(key), _unescape(rest)


def parse_properties(text: str) -> dict[str, str]:
    """Parse ``.properties`` text following ``java.util.Properties.load`` rules.

    The key ends at the first unescaped ``=``, ``:`` or whitespace. Supports
    ``#``/``!`` comments, ``\\`` line continuations and backslash escapes
    (``\\:``, ``\\=``, ``\\t``, ``\\uXXXX``). Later duplicates win.
    """
    values: dict[str, str] = {}
    for line in _logical_lines(text):
        key, value = _split_entry(line)
        values[key] = value
    return values


def load_properties(path: Path | str) -> dict[str, str]:
    """Read a properties file from disk.

    Raises:
        ConfigurationMissing: If the file does not exist.
    """
    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigurationMissing(
            message=f"Configuration file not found: {config_path}",
            details={"source": str(config_path)},
        )
    return parse_properties(config_path.read_text(encoding="utf-8"))


def load_suite_config(path: Path | str, settings: RunnerSettings | None = None) -> SuiteConfig:
    """Load the suite config once at startup, applying ``RESTCHAIN_*`` overrides."""
    properties = load_properties(path)
    if settings is not None:
        if settings.base_url:
            properties[BASE_URL_KEY] = settings.base_url
        if settings.env:
            properties[ENV_KEY] = settings.env

    config = SuiteConfig.from_properties(properties, source=str(path))
    logger.info("config.loaded", source=str(path), env=config.env, base_url=config.base_url)
    return config
