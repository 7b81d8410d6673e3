[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "folddb"
version = "0.1.0"
description = "Folds, security labels, an append-only store and verifiable transform expressions for policy-enforced data access"
requires-python = ">=3.10"
dependencies = []
keywords = ["database", "access-control", "security-labels", "append-only", "transforms"]
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
    "Topic :: Database",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["folddb"]

[tool.pytest.ini_options]
addopts = "-ra"
