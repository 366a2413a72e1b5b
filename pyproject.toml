[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "microed"
version = "0.1.0"
description = "Core pieces of a terminal text editor: character handling, split layout, syntax highlighting and syntax file tools"
requires-python = ">=3.10"
keywords = ["editor", "syntax-highlighting", "splits", "nanorc", "unicode"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Editors",
    "Topic :: Text Processing",
]
dependencies = [
    "pyyaml>=6.0",
    "wcwidth>=0.2.6",
    "semver>=3.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
microed-nanorc = "microed.nanorc:main"
microed-buildinfo = "microed.buildinfo:main"

[tool.hatch.build.targets.wheel]
packages = ["microed"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
