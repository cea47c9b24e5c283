[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mdengine"
version = "0.1.0"
description = "Event-sourced order book engine for Polymarket prediction-market data"
requires-python = ">=3.10"
keywords = [
    "order book",
    "market data",
    "prediction markets",
    "polymarket",
    "websocket",
    "event sourcing",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Investment",
]
dependencies = [
    "websocket-client",
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
mdengine = "mdengine.cli:main"
mdengine-listen = "mdengine.listener:main"

[tool.hatch.build.targets.wheel]
packages = ["mdengine"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
