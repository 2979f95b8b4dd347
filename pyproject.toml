[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "repshare"
version = "0.1.0"
description = "Three-party replicated secret sharing: fixed-point values, sharing and revealing, bit-sliced conversion and piecewise functions"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "secret-sharing",
    "mpc",
    "multiparty-computation",
    "fixed-point",
    "replicated-sharing",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["repshare"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
