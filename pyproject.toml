[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mediameta"
version = "0.1.0"
description = "Parsers for ISO base media file boxes and EBML/WebM container metadata"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "isobmff",
    "heif",
    "heic",
    "mp4",
    "mov",
    "quicktime",
    "ebml",
    "webm",
    "matroska",
    "metadata",
]
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
    "Topic :: Multimedia",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["mediameta"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
