[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "oceansurf"
version = "1.1.0"
description = "FFT ocean surface simulation (Tessendorf), Preetham sky model, FPS camera and grid mesh data for rendering"
requires-python = ">=3.10"
dependencies = ["numpy"]
keywords = ["ocean", "water", "tessendorf", "fft", "preetham", "sky", "camera", "mesh", "rendering"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Graphics :: 3D Rendering",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["oceansurf"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
