[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "beattrack"
version = "0.1.0"
description = "Real-time beat tracking and onset detection functions for audio streams"
requires-python = ">=3.10"
dependencies = [
    "numpy",
    "scipy",
]
keywords = ["beat tracking", "tempo", "onset detection", "audio", "music information retrieval"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Analysis",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["beattrack"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
