"""Shared fakes standing in for the libvirt bindings."""

import types

import pytest

from domain_agent import config, hypervisor
from domain_agent.models import DomainState


class _StubLibvirtError(Exception):
    """Raised by the stub bindings wherever libvirt would raise libvirtError."""


class _StubDomain:
    """virDomain exposing only name() and state()."""

    def __init__(self, name, state=DomainState.RUNNING, fail_name=False, fail_state=False):
        self._name = name
        self._state = state
        self._fail_name = fail_name
        self._fail_state = fail_state

    def name(self):
        if self._fail_name:
            raise _StubLibvirtError("virDomainGetName failed")
        return self._name

    def state(self):
        if self._fail_state:
            raise _StubLibvirtError(f"virDomainGetState failed for {self._name}")
        return [int(self._state), 0]


class _StubConnection:
    """virConnect exposing listAllDomains() and close()."""

    def __init__(self, domains=(), fail_list=False, fail_close=False):
        self._domains = list(domains)
        self._fail_list = fail_list
        self._fail_close = fail_close
        self.list_flags = None
        self.closed = False

    def listAllDomains(self, flags=0):  # noqa: N802 – libvirt naming
        self.list_flags = flags
        if self._fail_list:
            raise _StubLibvirtError("virConnectListAllDomains failed")
        return list(self._domains)

    def close(self):
        self.closed = True
        if self._fail_close:
            raise _StubLibvirtError("virConnectClose failed")
        return 0


class _StubLibvirt:
    """Installable replacement for the ``libvirt`` module inside hypervisor."""

    libvirtError = _StubLibvirtError
    VIR_CONNECT_LIST_DOMAINS_ACTIVE = 1
    VIR_CONNECT_LIST_DOMAINS_INACTIVE = 2

    def __init__(self, conn=None, open_error=None, open_returns_none=False):
        self._conn = conn
        self._open_error = open_error
        self._open_returns_none = open_returns_none
        self.opened_uris = []

    def open(self, uri):
        self.opened_uris.append(uri)
        if self._open_error is not None:
            raise _StubLibvirtError(self._open_error)
        if self._open_returns_none:
            return None
        return self._conn


@pytest.fixture()
def stubs():
    """Expose the stub classes to tests without importing conftest."""
    return types.SimpleNamespace(
        Domain=_StubDomain,
        Connection=_StubConnection,
        Libvirt=_StubLibvirt,
        LibvirtError=_StubLibvirtError,
    )


@pytest.fixture()
def install_libvirt(monkeypatch):
    """Return a helper that swaps hypervisor.libvirt for a stub module."""

    def _install(**kwargs):
        stub = _StubLibvirt(**kwargs)
        monkeypatch.setattr(hypervisor, "libvirt", stub)
        return stub

    return _install


@pytest.fixture()
def restore_settings(monkeypatch):
    """Keep process-level settings from leaking between tests."""
    monkeypatch.setattr(config, "CONFIG_PATH", config.CONFIG_PATH)
    monkeypatch.setattr(config, "LIBVIRT_URI", config.LIBVIRT_URI)
