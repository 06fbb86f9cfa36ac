[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ovsdbkit"
version = "0.1.0"
description = "OVSDB (RFC 7047) data notation, schema, condition, mutation and update types"
requires-python = ">=3.10"
dependencies = []
keywords = ["ovsdb", "rfc7047", "openvswitch", "json-rpc", "database", "schema"]
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
    "Topic :: Database",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ovsdbkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
