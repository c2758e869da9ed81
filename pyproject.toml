[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "chainrpc-types"
version = "0.1.7"
description = "Typed values for Ethereum JSON-RPC: quantities, hashes, blocks, logs, fee history, proofs, work packages, peer info and traces, with JSON encoding and decoding."
requires-python = ">=3.10"
dependencies = []
keywords = ["ethereum", "json-rpc", "web3", "types", "serialization", "traces"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["chainrpc_types"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
