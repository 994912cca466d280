[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gpudeviceconfig"
version = "0.14.1"
description = "Configuration model and validation for a GPU device plugin and feature-discovery service on Kubernetes nodes"
requires-python = ">=3.10"
keywords = [
    "kubernetes",
    "gpu",
    "device-plugin",
    "mig",
    "time-slicing",
    "configuration",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
    "Typing :: Typed",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["gpudeviceconfig"]

[tool.hatch.build.targets.sdist]
include = [
    "gpudeviceconfig",
    "tests",
    "pyproject.toml",
    "README.md",
]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
