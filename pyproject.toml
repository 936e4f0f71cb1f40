[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cipherchat"
version = "0.1.0"
description = "A small terminal chat server and client with sign-up, private messages and broadcasts over an AES-GCM encrypted line protocol."
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = ["chat", "terminal", "tcp", "aes-gcm", "asyncio"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Framework :: AsyncIO",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Chat",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
cipherchat = "cipherchat.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["cipherchat"]

[tool.pytest.ini_options]
addopts = "-ra"
