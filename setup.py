from setuptools import find_packages, setup

# determine the version of the package
version = "0.1.0"

# most arguments for setup are defined in pyproject.toml
setup(
    packages=find_packages(include=["rdcases", "rdcases.*"]),
    version=version,
)
