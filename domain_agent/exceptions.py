"""Error types and HTTP error helpers for the domain agent."""

from fastapi import HTTPException


class AgentError(Exception):
    """Base class for failures that abort a /domainList request."""


class HypervisorConnectionError(AgentError):
    """The libvirt management connection could not be opened."""


class DomainListError(AgentError):
    """Enumerating domains on an open connection failed."""


class ConfigReadError(AgentError):
    """The agent config file could not be read."""


class ConfigParseError(AgentError):
    """The agent config file is not a valid YAML mapping."""


def internal_error(detail: str) -> HTTPException:
    """Return 500 error for failures while building a response."""
    return HTTPException(status_code=500, detail=detail)
