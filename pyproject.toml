[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kinfer"
version = "0.1.0"
description = "A small neural-network inference toolkit: tensors, layers and image helpers built on numpy"
requires-python = ">=3.10"
dependencies = [
    "numpy",
    "pillow",
]
keywords = ["inference", "neural-network", "tensor", "pooling", "deep-learning"]
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
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["kinfer"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
