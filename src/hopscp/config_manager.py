"""Configuration management module.

Builds the immutable run configuration from CLI options, environment
variables and an optional TOML file. Everything is validated up front so
no network activity starts on a malformed configuration.

Security:
- Key material is never logged or echoed
- Proxy settings are all-or-nothing
"""

import ipaddress
import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

try:
    import tomli  # type: ignore[import]
except ImportError:
    # Fallback for newer Python versions
    try:
        import tomllib as tomli  # type: ignore[import]
    except ImportError as e:
        raise ImportError("toml library not available. Install with: pip install tomli") from e

from hopscp.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SSH_PORT = 22

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,  # U+00B5 micro sign
    "μs": 1e-6,  # U+03BC greek mu
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

# Longest unit names first so "ms" is not read as "m"
_DURATION_COMPONENT = re.compile(r"([0-9]+(?:\.[0-9]*)?|\.[0-9]+)(ns|us|µs|μs|ms|s|m|h)")

# Largest duration representable as int64 nanoseconds (about 2562047h)
MAX_DURATION_SECONDS = (2**63 - 1) / 1e9

# Fields that make up one endpoint, keyed by their name in the flat value map
_ENDPOINT_FIELDS = ("host", "port", "username", "key", "key_file", "fingerprint")


class Direction(Enum):
    """Transfer direction."""

    UPLOAD = "upload"
    DOWNLOAD = "download"

    @classmethod
    def parse(cls, value: str | None) -> "Direction":
        """Parse direction from user input (case-insensitive)."""
        normalized = (value or "").strip().lower()
        for direction in cls:
            if direction.value == normalized:
                return direction
        raise ConfigurationError(
            "Failed to parse direction: direction must be either upload or download"
        )


def parse_duration(text: Any, field: str = "duration") -> float:
    """Parse a duration string such as "30s", "1m30s" or "1.5h".

    Args:
        text: Duration string
        field: Field name used in error messages

    Returns:
        Duration in seconds (always positive)

    Raises:
        ConfigurationError: Empty, malformed, zero, negative or out of range duration
    """
    value = "" if text is None else str(text).strip()
    if not value:
        raise ConfigurationError(f"Failed to parse {field}: value must not be empty")

    if value.startswith("-"):
        raise ConfigurationError(f"Failed to parse {field}: duration must be positive")
    if value.startswith("+"):
        value = value[1:]

    if value == "0":
        raise ConfigurationError(f"Failed to parse {field}: duration must be positive")

    total = 0.0
    pos = 0
    while pos < len(value):
        match = _DURATION_COMPONENT.match(value, pos)
        if not match:
            raise ConfigurationError(f"Failed to parse {field}: invalid duration {text!r}")
        number, unit = match.groups()
        total += float(number) * _DURATION_UNITS[unit]
        pos = match.end()

    if pos == 0 or total <= 0:
        raise ConfigurationError(f"Failed to parse {field}: duration must be positive")
    if total > MAX_DURATION_SECONDS:
        raise ConfigurationError(
            f"Failed to parse {field}: invalid duration {text!r} (out of range)"
        )

    return total


def parse_sources(value: str | list[str] | None) -> tuple[str, ...]:
    """Split a newline-delimited source list.

    Lines are stripped and blank lines dropped. A source must name a file,
    so a path with an empty final component is rejected.
    """
    if value is None:
        lines: list[str] = []
    elif isinstance(value, str):
        lines = value.splitlines()
    else:
        lines = [str(item) for item in value]

    sources = tuple(line.strip() for line in lines if line.strip())
    if not sources:
        raise ConfigurationError("Failed to parse source: at least one source file is required")

    for source in sources:
        if source.endswith("/"):
            raise ConfigurationError(f"Failed to parse source: {source!r} does not name a file")

    return sources


@dataclass(frozen=True)
class EndpointConfig:
    """Connection and identity parameters for one remote host."""

    name: str
    host: str
    port: int
    user: str
    key_material: str
    fingerprint: str

    @property
    def address(self) -> str:
        """host:port, with IPv6 literals bracketed."""
        try:
            if ipaddress.ip_address(self.host).version == 6:
                return f"[{self.host}]:{self.port}"
        except ValueError:
            pass
        return f"{self.host}:{self.port}"

    def __repr__(self) -> str:
        # Keep key material out of tracebacks and debug logs
        return (
            f"EndpointConfig(name={self.name!r}, host={self.host!r}, port={self.port}, "
            f"user={self.user!r}, fingerprint={self.fingerprint!r})"
        )


@dataclass(frozen=True)
class TransferConfig:
    """Complete, validated configuration for one run."""

    action_timeout: float
    dial_timeout: float
    direction: Direction
    target: EndpointConfig
    proxy: EndpointConfig | None
    sources: tuple[str, ...]
    destination: str

    @property
    def uses_proxy(self) -> bool:
        return self.proxy is not None


class ConfigManager:
    """Load and validate hopscp configuration.

    Values come from a flat mapping (CLI options, already merged with their
    environment variables by click) layered over an optional TOML file:

        action_timeout = "5m"
        timeout = "30s"
        direction = "upload"
        sources = ["dist/app.tar.gz", "dist/app.sha256"]
        destination = "/srv/releases"

        [target]
        host = "10.0.0.5"
        username = "deploy"
        key_file = "~/.ssh/deploy_ed25519"
        fingerprint = "SHA256:..."

        [proxy]
        host = "bastion.example.com"
        ...
    """

    @classmethod
    def read_config_file(cls, path: Path) -> dict[str, Any]:
        """Read TOML config file and flatten it into option names.

        Raises:
            ConfigurationError: File missing or not valid TOML
        """
        try:
            with open(path, "rb") as f:
                data = tomli.load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Config file not found: {path}") from e
        except (OSError, tomli.TOMLDecodeError) as e:
            raise ConfigurationError(f"Failed to read config file {path}: {e}") from e

        flat: dict[str, Any] = {}
        for key, value in data.items():
            if key == "target" and isinstance(value, dict):
                flat.update({k: v for k, v in value.items() if k in _ENDPOINT_FIELDS})
            elif key == "proxy" and isinstance(value, dict):
                flat.update({f"proxy_{k}": v for k, v in value.items() if k in _ENDPOINT_FIELDS})
            elif key == "timeout":
                flat["dial_timeout"] = value
            else:
                flat[key] = value

        logger.debug(f"Loaded config file {path}")
        return flat

    @classmethod
    def load(cls, values: dict[str, Any], config_file: Path | None = None) -> TransferConfig:
        """Build a validated TransferConfig.

        Args:
            values: Explicit values; None entries fall through to the file
            config_file: Optional TOML file with defaults

        Returns:
            TransferConfig ready for use

        Raises:
            ConfigurationError: Any field is missing or invalid
        """
        merged: dict[str, Any] = {}
        if config_file is not None:
            merged.update(cls.read_config_file(Path(config_file).expanduser()))
        merged.update({k: v for k, v in values.items() if v is not None})

        action_timeout = parse_duration(merged.get("action_timeout"), "action timeout")
        direction = Direction.parse(merged.get("direction"))
        dial_timeout = parse_duration(merged.get("dial_timeout"), "timeout")

        target = cls._build_endpoint("target", merged, prefix="")
        proxy = cls._build_proxy(merged)

        sources = parse_sources(merged.get("sources"))
        destination = str(merged.get("destination") or "").strip()
        if not destination:
            raise ConfigurationError("Failed to parse target folder: value must not be empty")

        return TransferConfig(
            action_timeout=action_timeout,
            dial_timeout=dial_timeout,
            direction=direction,
            target=target,
            proxy=proxy,
            sources=sources,
            destination=destination,
        )

    @classmethod
    def _build_proxy(cls, merged: dict[str, Any]) -> EndpointConfig | None:
        """Build the proxy endpoint, or None when no proxy field is set."""
        present = [f for f in _ENDPOINT_FIELDS if cls._text(merged.get(f"proxy_{f}"))]
        if not present:
            return None
        if not cls._text(merged.get("proxy_host")):
            raise ConfigurationError(
                "Failed to parse proxy host: proxy settings given "
                f"({', '.join('proxy_' + f for f in present)}) but proxy host is empty"
            )
        return cls._build_endpoint("proxy", merged, prefix="proxy_")

    @classmethod
    def _build_endpoint(cls, name: str, merged: dict[str, Any], prefix: str) -> EndpointConfig:
        host = cls._require(merged, f"{prefix}host", f"{name} host")
        user = cls._require(merged, f"{prefix}username", f"{name} username")
        fingerprint = cls._require(merged, f"{prefix}fingerprint", f"{name} fingerprint")
        port = cls._parse_port(merged.get(f"{prefix}port"), name)
        key_material = cls._key_material(merged, prefix, name)

        return EndpointConfig(
            name=name,
            host=host,
            port=port,
            user=user,
            key_material=key_material,
            fingerprint=fingerprint,
        )

    @classmethod
    def _key_material(cls, merged: dict[str, Any], prefix: str, name: str) -> str:
        """Key material inline, or read from key_file when not given inline."""
        material = merged.get(f"{prefix}key")
        if isinstance(material, str) and material.strip():
            return material

        key_file = cls._text(merged.get(f"{prefix}key_file"))
        if key_file:
            path = Path(key_file).expanduser()
            try:
                return path.read_text()
            except OSError as e:
                raise ConfigurationError(f"Failed to read {name} key file {path}: {e}") from e

        raise ConfigurationError(f"Failed to parse {name} key: value must not be empty")

    @classmethod
    def _parse_port(cls, value: Any, name: str) -> int:
        text = cls._text(value)
        if not text:
            return DEFAULT_SSH_PORT
        try:
            port = int(text)
        except ValueError as e:
            raise ConfigurationError(
                f"Failed to parse {name} port: {text!r} is not a number"
            ) from e
        if not 1 <= port <= 65535:
            raise ConfigurationError(f"Failed to parse {name} port: {port} is out of range")
        return port

    @classmethod
    def _require(cls, merged: dict[str, Any], key: str, label: str) -> str:
        text = cls._text(merged.get(key))
        if not text:
            raise ConfigurationError(f"Failed to parse {label}: value must not be empty")
        return text

    @staticmethod
    def _text(value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()


__all__ = [
    "ConfigManager",
    "Direction",
    "EndpointConfig",
    "TransferConfig",
    "parse_duration",
    "parse_sources",
]
