[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "netstack"
version = "0.1.0"
description = "Building blocks for a user-space TCP/IP stack: packet headers, checksums, sockets, an event loop and TUN adapters"
requires-python = ">=3.10"
dependencies = []
keywords = ["tcp", "ipv4", "ethernet", "arp", "tun", "networking", "event loop", "checksum"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["netstack"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
