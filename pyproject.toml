[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "webcalc"
version = "0.1.0"
description = "Distributed arithmetic calculator: an HTTP orchestrator that splits expressions into tasks and agents that compute them"
requires-python = ">=3.10"
keywords = ["calculator", "rpn", "orchestrator", "agent", "distributed", "http"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Environment :: Web Environment",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: Scientific/Engineering :: Mathematics",
]
dependencies = [
    "python-dotenv",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
webcalc-orchestrator = "webcalc.orchestrator_cli:main"
webcalc-agent = "webcalc.agent_cli:main"
webcalc-frontend = "webcalc.frontend:main"

[tool.hatch.build.targets.wheel]
packages = ["webcalc"]

[tool.hatch.build.targets.sdist]
include = ["webcalc", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
check_untyped_defs = true
