"""File descriptors for Linux TUN and TAP devices."""

from __future__ import annotations

import errno
import fcntl
import os
import struct

from .errors import UnixError
from .file_descriptor import FileDescriptor

CLONEDEV = "/dev/net/tun"
IFNAMSIZ = 16
IFF_TUN = 0x0001
IFF_TAP = 0x0002
IFF_NO_PI = 0x1000
TUNSETIFF = 0x400454CA

# struct ifreq: a 16-byte name, then a union whose first member is the flags.
_IFREQ = struct.Struct("=16sh22x")


def tun_request(devname: str, is_tun: bool) -> bytes:
    """The ``ifreq`` request that attaches to device ``devname``.

    The name is cut to fit and always NUL-terminated; no packet-info header
    is requested.
    """
    name = devname.encode()[: IFNAMSIZ - 1]
    flags = (IFF_TUN if is_tun else IFF_TAP) | IFF_NO_PI
    return _IFREQ.pack(name, flags)


class TunTapFD(FileDescriptor):
    """A descriptor on an existing persistent TUN or TAP device.

    The device must already exist and be usable by the current user.
    """

    def __init__(self, devname: str, is_tun: bool) -> None:
        try:
            fd = os.open(CLONEDEV, os.O_RDWR | os.O_CLOEXEC)
        except OSError as exc:
            raise UnixError("open", exc.errno or errno.EIO) from exc
        super().__init__(fd)
        try:
            fcntl.ioctl(self.fd_num(), TUNSETIFF, tun_request(devname, is_tun))
        except OSError as exc:
            self.close()
            raise UnixError("ioctl", exc.errno or errno.EIO) from exc


class TunFD(TunTapFD):
    """A TUN device, which carries IP datagrams."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, True)


class TapFD(TunTapFD):
    """A TAP device, which carries Ethernet frames."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, False)