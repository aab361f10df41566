[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rtpnegotiate"
version = "3.4.0"
description = "Validation and negotiation of RTP, SCTP, ICE and DTLS parameters for SFU clients"
requires-python = ">=3.10"
dependencies = []
keywords = ["rtp", "webrtc", "sfu", "codec", "negotiation", "h264", "rtx", "ice", "dtls", "sctp"]
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
    "Topic :: Communications :: Conferencing",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["rtpnegotiate"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
