"""Host agent serving the local libvirt domain inventory over HTTP."""

__version__ = "0.1.0"
