"""Packet formats, checksums, sockets, an event loop and TUN adapters for a user-space TCP/IP stack."""

__version__ = "0.1.0"