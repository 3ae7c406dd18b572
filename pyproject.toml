[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "leaderboard"
version = "0.1.0"
description = "HTTP service for registering players, recording match scores and keeping a leaderboard"
requires-python = ">=3.10"
keywords = ["leaderboard", "scores", "matches", "jwt", "flask", "rest", "sqlite"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "flask",
    "bcrypt",
    "pyjwt",
    "python-dotenv",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
leaderboard = "leaderboard.server:main"

[tool.hatch.build.targets.wheel]
packages = ["leaderboard"]

[tool.hatch.build.targets.sdist]
include = ["leaderboard", "tests", "README.md"]

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
warn_unused_ignores = true
warn_redundant_casts = true
