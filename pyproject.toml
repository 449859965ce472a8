[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "semslam"
version = "0.1.0"
description = "Building blocks for semantic stereo SLAM: dense matrix algebra, quad feature matching, loop candidates and semantic point-cloud mapping"
requires-python = ">=3.10"
keywords = ["slam", "stereo", "visual-odometry", "point-cloud", "semantic-segmentation", "feature-matching"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Processing",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
    "hypothesis",
]

[tool.hatch.build.targets.wheel]
packages = ["semslam"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
