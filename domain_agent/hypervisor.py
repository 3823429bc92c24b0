"""libvirt domain discovery for the domain agent."""

from typing import Any, List, Optional

import structlog

try:
    import libvirt
except ImportError:
    libvirt = None

from .exceptions import DomainListError, HypervisorConnectionError
from .models import (
    ACTIVE_STATES,
    DOMAIN_STATUS_ACTIVE,
    DOMAIN_STATUS_INACTIVE,
    DomainRecord,
)

logger = structlog.get_logger()


def classify_state(state: int) -> str:
    """Map a libvirt run state onto the coarse active/inactive status.

    running, paused and nostate count as active; shutoff, crashed,
    pmsuspended and any unknown value are inactive.
    """
    if state in ACTIVE_STATES:
        return DOMAIN_STATUS_ACTIVE
    return DOMAIN_STATUS_INACTIVE


def open_connection(uri: str) -> Any:
    """Open a libvirt connection or raise HypervisorConnectionError."""
    if libvirt is None:
        raise HypervisorConnectionError(
            "failed to connect to libvirt: libvirt-python not installed"
        )
    try:
        conn = libvirt.open(uri)
    except libvirt.libvirtError as e:
        logger.error("libvirt_connect_failed", uri=uri, error=str(e))
        raise HypervisorConnectionError(f"failed to connect to libvirt: {e}") from e
    if conn is None:
        logger.error("libvirt_connect_failed", uri=uri, error="no connection handle")
        raise HypervisorConnectionError(
            f"failed to connect to libvirt: could not open {uri}"
        )
    return conn


def list_domains(uri: str) -> List[DomainRecord]:
    """Return every domain (running or not) with its coarse status.

    A fresh connection is opened for each call and closed before returning,
    whether or not listing succeeds. Domains whose name or state cannot be
    read are logged and left out.

    Args:
        uri: libvirt connection URI, e.g. ``qemu:///system``

    Returns:
        Domain records in the hypervisor's enumeration order

    Raises:
        HypervisorConnectionError: the connection could not be opened
        DomainListError: enumerating domains failed
    """
    conn = open_connection(uri)
    try:
        flags = (
            libvirt.VIR_CONNECT_LIST_DOMAINS_ACTIVE
            | libvirt.VIR_CONNECT_LIST_DOMAINS_INACTIVE
        )
        try:
            domains = conn.listAllDomains(flags)
        except libvirt.libvirtError as e:
            logger.error("libvirt_list_failed", uri=uri, error=str(e))
            raise DomainListError(f"failed to list domains: {e}") from e

        records: List[DomainRecord] = []
        for dom in domains:
            record = _describe_domain(dom)
            if record is not None:
                records.append(record)
    finally:
        _close_connection(conn, uri)

    logger.info("domains_listed", uri=uri, count=len(records))
    return records


def _close_connection(conn: Any, uri: str) -> None:
    try:
        conn.close()
    except libvirt.libvirtError as e:
        logger.warning("libvirt_close_failed", uri=uri, error=str(e))


def _describe_domain(dom: Any) -> Optional[DomainRecord]:
    try:
        name = dom.name()
    except libvirt.libvirtError as e:
        logger.warning("domain_name_lookup_failed", error=str(e))
        return None
    if not name:
        logger.warning("domain_name_empty")
        return None

    try:
        state, _reason = dom.state()
    except libvirt.libvirtError as e:
        logger.warning("domain_state_lookup_failed", domain=name, error=str(e))
        return None

    return DomainRecord(name=name, status=classify_state(state))
