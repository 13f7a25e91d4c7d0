[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "meshcorres"
version = "0.1.0"
description = "Triangle correspondences between 3D meshes, found by deforming the source mesh into the target with iterative least squares"
requires-python = ">=3.10"
keywords = [
    "mesh",
    "deformation",
    "correspondence",
    "obj",
    "kd-tree",
    "least-squares",
    "deformation-transfer",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Modeling",
    "Topic :: Scientific/Engineering :: Mathematics",
]
dependencies = [
    "numpy",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
corres-resolve = "meshcorres.problem:main"

[tool.hatch.build.targets.wheel]
packages = ["meshcorres"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
