[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wasmbundle"
version = "0.1.0"
description = "OCI image tarballs for WASI modules, sandbox manager messages and runtime-spec helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["wasm", "wasi", "oci", "container", "image", "tar", "protobuf"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Archiving :: Packaging",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
wasi-demo-app = "wasmbundle.demo_app:main"

[tool.hatch.build.targets.wheel]
packages = ["wasmbundle"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
