[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pcgsolve"
version = "0.1.0"
description = "Jacobi-preconditioned conjugate gradient solver for sparse symmetric positive-definite systems stored in CSR form"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "conjugate gradient",
    "sparse matrix",
    "CSR",
    "linear algebra",
    "preconditioning",
    "Jacobi",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
pcgsolve = "pcgsolve.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["pcgsolve"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
