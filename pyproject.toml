[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "limitbook"
version = "0.1.0"
description = "A limit order book matching engine with stop, all-or-none and immediate-or-cancel orders"
requires-python = ">=3.10"
dependencies = []
keywords = ["order book", "matching engine", "trading", "exchange", "limit order"]
classifiers = [
    "Development Status :: 4 - Beta",
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

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
limitbook-simulate = "limitbook.simulator:main"

[tool.hatch.build.targets.wheel]
packages = ["limitbook"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
