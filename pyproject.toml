[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "durablewf"
version = "0.1.0"
description = "Durable workflow engine core: event history, deterministic coroutines and a SQLite task backend"
requires-python = ">=3.10"
dependencies = []
keywords = ["workflow", "durable execution", "orchestration", "event sourcing", "coroutines", "sqlite"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
    "Topic :: Database",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["durablewf"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
