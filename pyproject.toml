[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "concurkit"
version = "0.1.0"
description = "Concurrency building blocks for Python threads: queue locks, sequence locks, lock-free lists, stacks and queues, list-based sets, a thread pool and a small HTTP example server."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "concurrency",
    "locks",
    "seqlock",
    "lock-free",
    "linked-list",
    "queue",
    "stack",
    "thread-pool",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
concurkit-http-example = "concurkit.http_example:main"

[tool.hatch.build.targets.wheel]
packages = ["concurkit"]

[tool.pytest.ini_options]
addopts = "-ra"
