[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ssgserve"
version = "0.1.0"
description = "A small multi-worker static file HTTP server for static site generator output"
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "server", "static", "ssg", "timer-wheel"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: No Input/Output (Daemon)",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
ssgserve = "ssgserve.main:main"

[tool.hatch.build.targets.wheel]
packages = ["ssgserve"]

[tool.pytest.ini_options]
addopts = "-ra"
