[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "robs"
version = "0.1.0"
description = "Profiles, settings, scenes, device discovery and FFmpeg recording for a screen-capture studio"
requires-python = ">=3.11"
keywords = ["streaming", "recording", "screen-capture", "ffmpeg", "scenes", "profiles"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Video :: Capture",
]
dependencies = [
    "tomli-w",
    "platformdirs",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["robs"]

[tool.pytest.ini_options]
addopts = "-ra"
