[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "homethings"
version = "0.1.0"
description = "Home automation tools that expose weather, lights and a car charging station as Web of Things devices"
requires-python = ">=3.11"
keywords = [
    "home-automation",
    "web-of-things",
    "modbus",
    "weather",
    "ev-charging",
    "lights",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Home Automation",
]
dependencies = [
    "requests",
    "platformdirs",
    "tomli-w",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
weather = "homethings.weather.cli:main"
lights = "homethings.lights.cli:main"
alfen = "homethings.alfen.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["homethings"]

[tool.pytest.ini_options]
addopts = "-ra"
