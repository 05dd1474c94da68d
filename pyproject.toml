[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mqttsession"
version = "0.1.0"
description = "MQTT v5 client session-state building blocks: a send quota and packet stores in memory or on disk"
requires-python = ">=3.10"
dependencies = []
keywords = ["mqtt", "mqtt5", "session", "persistence", "qos", "receive-maximum"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mqttsession"]

[tool.hatch.build.targets.sdist]
include = ["mqttsession", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
strict = true
