[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "embenchpy"
version = "0.1.0"
description = "Embedded-style benchmark kernels (tarfind, ud, wikisort, statemate) with a small deterministic runtime"
requires-python = ">=3.10"
dependencies = []
keywords = ["benchmark", "embedded", "wikisort", "statechart", "lu-decomposition"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: System :: Benchmark",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
embenchpy = "embenchpy.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["embenchpy"]

[tool.pytest.ini_options]
addopts = "-ra"
