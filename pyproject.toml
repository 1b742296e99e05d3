[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gatorfeed"
version = "0.1.0"
description = "A command-line RSS feed aggregator that stores users, feeds and posts in SQLite."
requires-python = ">=3.10"
dependencies = []
keywords = ["rss", "feed", "aggregator", "cli", "sqlite"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
gatorfeed = "gatorfeed.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["gatorfeed"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
