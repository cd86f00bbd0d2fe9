[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dbwatch"
version = "0.8.1"
description = "Change-notification watchers for an embedded key/value database"
requires-python = ">=3.10"
dependencies = []
keywords = ["database", "embedded-database", "watch", "events", "notifications"]
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
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["dbwatch"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
