"""Agent configuration: YAML identity file and process settings."""

import os
from typing import Any, Dict

import structlog
import yaml

from .exceptions import ConfigParseError, ConfigReadError
from .models import AgentConfig

logger = structlog.get_logger()

# Process settings (CLI flags override these at startup)
CONFIG_PATH = os.getenv("AGENT_CONFIG_PATH", "")
LIBVIRT_URI = os.getenv("AGENT_LIBVIRT_URI", "qemu:///system")
HOST = os.getenv("AGENT_HOST", "0.0.0.0")
PORT = int(os.getenv("AGENT_PORT", "8080"))
LOG_LEVEL = os.getenv("AGENT_LOG_LEVEL", "info")


def load_config(path: str) -> AgentConfig:
    """Read and parse the agent config file.

    The file is read on every call; nothing is cached between requests.

    Args:
        path: Path to a YAML document with an ``agent_name`` key

    Returns:
        AgentConfig with ``agent_name`` taken verbatim from the file, or an
        empty name when the key is absent

    Raises:
        ConfigReadError: the file could not be read
        ConfigParseError: the content is not a YAML mapping with a string
            ``agent_name``
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            text = fh.read()
    except OSError as e:
        logger.error("config_read_failed", path=path, error=str(e))
        raise ConfigReadError(f"failed to read config file: {e}") from e

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        logger.error("config_parse_failed", path=path, error=str(e))
        raise ConfigParseError(f"failed to parse config file: {e}") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        logger.error("config_not_a_mapping", path=path, type=type(raw).__name__)
        raise ConfigParseError(
            f"failed to parse config file: expected a mapping, got {type(raw).__name__}"
        )

    return _build_config(raw)


def _build_config(raw: Dict[str, Any]) -> AgentConfig:
    agent_name = raw.get("agent_name")
    if agent_name is None:
        return AgentConfig()
    if not isinstance(agent_name, str):
        # bare scalars like `agent_name: 42` load as int
        raise ConfigParseError(
            f"failed to parse config file: agent_name must be a string, "
            f"got {type(agent_name).__name__}"
        )
    return AgentConfig(agent_name=agent_name)


def set_config_path(path: str) -> None:
    """Set the config file read on every request."""
    global CONFIG_PATH
    CONFIG_PATH = path


def get_config_path() -> str:
    """Get the config file read on every request."""
    return CONFIG_PATH


def set_libvirt_uri(uri: str) -> None:
    """Set the libvirt connection URI used for inventory queries."""
    global LIBVIRT_URI
    LIBVIRT_URI = uri


def get_libvirt_uri() -> str:
    """Get the libvirt connection URI used for inventory queries."""
    return LIBVIRT_URI
