[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "aubatch"
version = "1.0.0"
description = "A threaded batch job scheduler with FCFS, SJF and priority policies and a built-in benchmark shell"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "batch",
    "scheduler",
    "scheduling",
    "fcfs",
    "sjf",
    "priority",
    "benchmark",
    "threads",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
aubatch = "aubatch.cli:main"
aubatch-worker = "aubatch.worker:main"

[tool.hatch.build.targets.wheel]
packages = ["aubatch"]

[tool.pytest.ini_options]
addopts = "-ra"
