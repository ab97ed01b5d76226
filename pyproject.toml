[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "biobloomcat"
version = "2.3.4"
description = "Categorize sequencing reads against k-mer filters using simple, harmonic, binomial or match-length scoring"
requires-python = ">=3.10"
dependencies = [
    "scipy",
]
keywords = [
    "bioinformatics",
    "k-mer",
    "read classification",
    "fasta",
    "fastq",
    "sequencing",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Bio-Informatics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["biobloomcat"]

[tool.pytest.ini_options]
addopts = "-ra"
