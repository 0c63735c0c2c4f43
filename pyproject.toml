[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "replforge"
version = "1.2.1"
description = "Build interactive command shells with declared commands, completion, help and keybindings"
requires-python = ">=3.10"
keywords = ["repl", "interpreter", "shell", "command-line", "completion"]
classifiers = [
    "Development Status :: 5 - Production/Stable",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: User Interfaces",
]
dependencies = [
    "prompt-toolkit>=3.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "pytest-asyncio>=0.21",
]

[project.scripts]
replforge-demo = "replforge.demo:main"

[tool.hatch.build.targets.wheel]
packages = ["replforge"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
