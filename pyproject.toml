[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "daemonkit"
version = "0.1.0"
description = "Building blocks for small event-driven daemons: queues, ring buffers, PID files, pipes, signal forwarding, sockets and buffered packet writers."
requires-python = ">=3.10"
dependencies = []
keywords = ["daemon", "event loop", "pid file", "ringbuffer", "signal", "socket", "pearson hash"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
    "Topic :: System",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["daemonkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
