[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pagesim"
version = "1.0.0"
description = "Trace-driven virtual memory simulator with dense, multi-level and inverted page tables and several page replacement policies"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "virtual memory",
    "paging",
    "page table",
    "inverted page table",
    "page replacement",
    "lru",
    "lfu",
    "mfu",
    "simulation",
    "operating systems",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
    "Topic :: System :: Operating System",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
pagesim = "pagesim.simulator:main"

[tool.hatch.build.targets.wheel]
packages = ["pagesim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
