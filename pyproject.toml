[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "restyle-device"
version = "0.1.0"
description = "Core logic of a push-to-talk voice restyling device: state machine, audio mixing, WAV framing, settings storage, screen layout and a restyle server client."
requires-python = ">=3.10"
dependencies = []
keywords = ["speech", "voice", "wav", "state-machine", "multipart", "audio-mixer"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Speech",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["restyle_device"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
