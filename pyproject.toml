[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "otelop"
version = "0.1.0"
description = "Collector resource model, receiver port discovery and reconciliation helpers for OpenTelemetry Collector deployments"
requires-python = ">=3.10"
keywords = ["opentelemetry", "collector", "kubernetes", "operator", "receivers"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["otelop"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
