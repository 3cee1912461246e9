[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "termcom"
version = "0.1.0"
description = "A small terminal chat server and client with operator commands to broadcast messages and kick clients"
requires-python = ">=3.10"
dependencies = []
keywords = ["chat", "tcp", "terminal", "server", "client"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Chat",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
termcom-server = "termcom.server:main"
termcom-client = "termcom.client:main"

[tool.hatch.build.targets.wheel]
packages = ["termcom"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
