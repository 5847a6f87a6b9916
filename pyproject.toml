[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "netlab"
version = "0.1.0"
description = "Small networking exercises: routing tables, leaky bucket, ARQ, chat, SMTP-style and socket request/response services"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "networking",
    "sockets",
    "routing",
    "dijkstra",
    "distance-vector",
    "arq",
    "leaky-bucket",
    "chat",
    "smtp",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
netlab-routing = "netlab.routing:main"
netlab-leaky-bucket = "netlab.leaky_bucket:main"
netlab-reverse = "netlab.reverse:main"
netlab-time = "netlab.time_service:main"
netlab-arrays = "netlab.arrays:main"
netlab-smtp = "netlab.smtp:main"
netlab-arq = "netlab.arq:main"
netlab-chat = "netlab.chat:main"

[tool.hatch.build.targets.wheel]
packages = ["netlab"]

[tool.pytest.ini_options]
addopts = "-ra"
