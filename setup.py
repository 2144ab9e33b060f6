#!/usr/bin/env python
# encoding: utf-8

from setuptools import setup

description = "Create and update BagIt 1.0 packages"

with open("README.md", encoding="utf-8") as f:
    long_description = f.read()

tests_require = ["pytest", "mock"]

setup(
    name="bagr",
    use_scm_version={"fallback_version": "1.0.0"},
    url="https://github.com/pwinckles/bagr",
    author="Peter Winckles",
    description=description,
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=["bagr"],
    entry_points={"console_scripts": ["bagr = bagr.cli:main"]},
    platforms=["POSIX", "Windows"],
    python_requires=">=3.8",
    setup_requires=["setuptools_scm"],
    extras_require={"test": tests_require},
    classifiers=[
        "License :: Public Domain",
        "Intended Audience :: Developers",
        "Topic :: Communications :: File Sharing",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: System :: Filesystems",
        "Programming Language :: Python :: 3",
    ],
)
