[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "crateindex"
version = "0.1.0"
description = "Read rustdoc JSON crate data and resolve the paths under which items are publicly importable"
requires-python = ">=3.10"
dependencies = []
keywords = ["rustdoc", "json", "visibility", "reexport", "name-resolution", "api"]
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
    "Topic :: Software Development :: Libraries",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["crateindex"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
