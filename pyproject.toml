[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gausscodec"
version = "0.1.0"
description = "Value codecs for the PostgreSQL and openGauss wire protocol: text and binary encoding, timestamps, bytea, COPY text, hstore and logging helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["postgresql", "opengauss", "timestamp", "bytea", "hstore", "codec", "copy"]
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
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["gausscodec"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
