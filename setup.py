#!/usr/bin/env python3
from setuptools import find_packages, setup

setup(
    name="filter-composer",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    license="MIT",
    description="Composable field-level filters for record collections, with in-memory evaluation and query generation",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Intended Audience :: Developers",
    ],
    python_requires=">=3.10",
    install_requires=open("requirements/requirements.in").read().splitlines(),
    extras_require={
        "dev": open("requirements/dev_requirements.in").read().splitlines(),
        "test": open("requirements/test_requirements.in").read().splitlines(),
    },
    include_package_data=True,
    package_data={"filter_composer": ["config/settings.yaml", "config/settings-schema.json"]},
    entry_points={"console_scripts": ["filter-composer=filter_composer.cli:main"]},
)
