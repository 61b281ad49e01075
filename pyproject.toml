[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rockskube"
version = "0.1.0"
description = "Kubernetes manifests and reconcile helpers for StarRocks clusters: names, labels, probes, mounts, pod and workload templates, rollout status."
requires-python = ">=3.10"
dependencies = []
keywords = ["kubernetes", "operator", "starrocks", "statefulset", "manifests"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Clustering",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["rockskube"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
