[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "keplermetrics"
version = "0.1.0"
description = "Prometheus-style energy and resource utilization metrics for processes, containers, virtual machines and nodes"
requires-python = ">=3.10"
dependencies = []
keywords = ["prometheus", "metrics", "energy", "power", "monitoring", "containers", "exporter"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["keplermetrics"]

[tool.pytest.ini_options]
addopts = "-ra"
