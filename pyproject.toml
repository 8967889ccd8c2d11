[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rockglobe"
version = "0.1.0"
description = "Building blocks for streaming and exploring a planet-scale octree of 3D terrain: path encoding, payload decoding, object lifecycle, caching, geodesy and controls."
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["octree", "terrain", "geodesy", "mesh", "streaming", "globe"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Games/Entertainment :: Simulation",
    "Topic :: Scientific/Engineering :: GIS",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["rockglobe"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
