"""Data models for the domain agent."""

from enum import IntEnum
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field


# Coarse status constants reported for each domain
DOMAIN_STATUS_ACTIVE = "active"
DOMAIN_STATUS_INACTIVE = "inactive"


class DomainState(IntEnum):
    """libvirt virDomainState values."""

    NOSTATE = 0
    RUNNING = 1
    BLOCKED = 2
    PAUSED = 3
    SHUTDOWN = 4
    SHUTOFF = 5
    CRASHED = 6
    PMSUSPENDED = 7


# Run states reported as "active"; every other state is "inactive"
ACTIVE_STATES = frozenset({DomainState.RUNNING, DomainState.PAUSED, DomainState.NOSTATE})


class DomainRecord(BaseModel):
    """One virtual machine domain known to the hypervisor."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="dom_name", min_length=1)
    status: Literal["active", "inactive"]


class AgentConfig(BaseModel):
    """Agent identity loaded from the YAML config file."""

    model_config = ConfigDict(frozen=True)

    agent_name: str = ""


class InventoryResponse(BaseModel):
    """Body of GET /domainList."""

    domain_info: List[DomainRecord] = []
    agent_name: str = ""
