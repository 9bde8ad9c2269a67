[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xosfs"
version = "0.1.0"
description = "Create, load and inspect XFS disk images for a small teaching operating system, with models of the machine's words, memory, registers and disk"
requires-python = ">=3.10"
dependencies = []
keywords = ["filesystem", "disk-image", "education", "operating-system", "assembly"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
    "Topic :: System :: Filesystems",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
xfs-interface = "xosfs.shell:main"

[tool.hatch.build.targets.wheel]
packages = ["xosfs"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
