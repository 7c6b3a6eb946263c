#!/usr/bin/env python

# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

import os
import setuptools
import sys


# vardump/__init__.py imports nothing else from the package, so it is safe to
# import here before any dependencies are installed.
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), "src"))
import vardump

del sys.path[0]


with open("DESCRIPTION.md", "r") as fh:
    long_description = fh.read()


if __name__ == "__main__":
    setuptools.setup(
        name="vardump",
        version=vardump.__version__,
        description="Readable, colorized dumps of arbitrary Python values for debugging",  # noqa
        long_description=long_description,
        long_description_content_type="text/markdown",
        license="MIT",
        author="Microsoft Corporation",
        python_requires=">=3.11",
        classifiers=[
            "Development Status :: 4 - Beta",
            "Programming Language :: Python :: 3.11",
            "Programming Language :: Python :: 3.12",
            "Programming Language :: Python :: 3.13",
            "Topic :: Software Development :: Debuggers",
            "Operating System :: OS Independent",
            "License :: OSI Approved :: MIT License",
        ],
        package_dir={"": "src"},
        packages=setuptools.find_namespace_packages(where="src", include=["vardump*"]),
        install_requires=["requests"],
        extras_require={
            "tests": ["pytest", "pytest-timeout"],
        },
    )
