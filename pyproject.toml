[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "minisql"
version = "2022.7.0"
description = "Storage layer of a small relational database: paged disk files, buffer pool, table heaps and supporting structures"
requires-python = ">=3.10"
dependencies = []
keywords = ["database", "storage", "buffer pool", "table heap", "pages"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Database :: Database Engines/Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["minisql"]

[tool.pytest.ini_options]
addopts = "-ra"
