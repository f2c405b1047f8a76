[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "eventloom"
version = "0.2.0"
description = "Event dispatcher and thread-safe event queue with listener filters, removal helpers and an active-object demo"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "event",
    "event-queue",
    "dispatcher",
    "listener",
    "observer",
    "active-object",
    "state-machine",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
eventloom-demo = "eventloom.activeobject:main"

[tool.hatch.build.targets.wheel]
packages = ["eventloom"]

[tool.pytest.ini_options]
addopts = "-ra"
