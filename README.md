# netstack

Building blocks for a user-space TCP/IP stack on Linux. Everything is plain
Python with no third-party dependencies.

## What is in it

- `netstack.parser`: `Parser` and `Serializer` for big-endian wire formats over lists
  of byte chunks, plus the `serialize(obj)` and `parse(obj, buffers, *args)` helpers.
  Parser errors are sticky: a read past the end sets `has_error()` and later reads
  return zero or empty bytes.
- `netstack.checksum`: `InternetChecksum`, the ones'-complement Internet checksum.
  Chunks may end in the middle of a 16-bit word.
- `netstack.ethernet`: `EthernetHeader`, `EthernetFrame`, `format_ethernet_address`
  and `ETHERNET_BROADCAST`.
- `netstack.ipv4`: `IPv4Header` (with `compute_checksum`, `pseudo_checksum` and
  `payload_length`) and `IPv4Datagram`. Parsing checks the version, header length
  and checksum. IP options are skipped, not interpreted.
- `netstack.arp`: `ARPMessage` for Ethernet/IPv4 requests and replies; other
  combinations fail to parse and refuse to serialize.
- `netstack.tcp_segment`: `TCPSenderMessage`, `TCPReceiverMessage`, `TCPMessage`,
  `UserDatagramInfo` and `TCPSegment`, whose `parse` verifies the checksum against
  a pseudo-header sum.
- `netstack.address`: `Address`, built with `Address.from_ip`, `Address.resolve` or
  `Address.from_ipv4_numeric`; lookup failures raise `GaiError`.
- `netstack.errors`: `TaggedError`, `UnixError`, `check_system_call` and `notnull`.
- `netstack.file_descriptor`: `FileDescriptor`, a handle that counts its reads and
  writes, tracks end of file, and shares its state with handles made by `duplicate()`.
- `netstack.sockets`: `UDPSocket`, `TCPSocket`, `LocalStreamSocket` (with `pair()`),
  `LocalDatagramSocket` and `PacketSocket`, all built on `FileDescriptor`.
- `netstack.eventloop`: `EventLoop`, a `poll`-based loop of file-descriptor rules
  (`add_rule`) and standalone tasks (`add_task`). Each `wait_next_event` serves at
  most one rule and returns a `Result`; rules that keep asking to run without doing
  any work raise a busy-wait error. `RuleHandle.cancel()` removes a rule.
- `netstack.rng`: `get_random_engine()`, a `random.Random` seeded from the system.
- `netstack.config`: `TCPConfig`, `FdAdapterConfig` and `FdAdapterBase`.
- `netstack.tcp_over_ip`: `TCPOverIPv4Adapter`, which wraps TCP messages in IPv4
  datagrams and unwraps only those that belong to the configured connection. While
  listening, the first SYN fixes the connection's addresses and ports.
- `netstack.tun`: `TunFD` and `TapFD` for existing persistent TUN/TAP devices, and
  `tun_request`, which builds the attach request.
- `netstack.tuntap_adapter`: `TCPOverIPv4OverTunFdAdapter`, reading and writing TCP
  messages through a TUN descriptor.
- `netstack.lossy_adapter`: `LossyFdAdapter`, which drops reads and writes at the
  rates in `FdAdapterConfig` (a rate `r` drops with probability `r / 65536`).

## Installation

```
pip install .
```

## Examples

Serialize and parse an IPv4 header:

```python
from netstack.ipv4 import IPv4Header
from netstack.parser import parse, serialize

header = IPv4Header(src=0x0A000001, dst=0x0A000002, length=20)
header.compute_checksum()
wire = serialize(header)

decoded = IPv4Header()
assert parse(decoded, wire)
print(decoded)  # IPv4 len=20 protocol=6 ttl=128 src=10.0.0.1 dst=10.0.0.2
```

An event loop watching a socket pair:

```python
from netstack.eventloop import Direction, EventLoop, Result
from netstack.sockets import LocalStreamSocket

left, right = LocalStreamSocket.pair()
loop = EventLoop()
received = []
loop.add_rule("read", right, Direction.IN, lambda: received.append(right.read(1024)))
left.write(b"hello")
assert loop.wait_next_event(100) is Result.SUCCESS
assert received == [b"hello"]
```

Opening a TUN device with `netstack.tun.TunFD` needs an existing persistent device and
the right permissions.

## What it does not do

The package carries TCP messages but does not run TCP: there is no sender, receiver,
reassembler or connection state machine, and nothing that turns the adapters into a
working TCP socket. There is no network interface that answers ARP, and no
command-line program.

## Running the tests

```
pip install .[test]
pytest
```