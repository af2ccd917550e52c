[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "qiflib"
version = "0.1.0"
description = "Quantitative information flow: channels, priors, vulnerability and leakage measures, refinement."
requires-python = ">=3.10"
keywords = [
    "quantitative information flow",
    "information leakage",
    "channels",
    "differential privacy",
    "g-vulnerability",
    "refinement",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Information Analysis",
    "Topic :: Security",
]
dependencies = [
    "numpy",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["qiflib"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
