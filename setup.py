#!/usr/bin/env python
import os

from setuptools import find_packages, setup


def get_version():
    path = os.path.join(os.path.dirname(__file__), "src", "ora_tools", "version.py")
    namespace = {}
    with open(path) as f:
        exec(f.read(), namespace)
    return namespace["__version__"]


setup(
    name="ora-tools",
    version=get_version(),
    description="Python package for reading and writing OpenRaster (.ora) files",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.9",
    install_requires=[
        "attrs>=23.1.0",
        "numpy",
        "Pillow>=10.3.0",
        "typing-extensions; python_version < '3.11'",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "ora-tools=ora_tools.cli:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Topic :: Multimedia :: Graphics",
        "Topic :: Multimedia :: Graphics :: Graphics Conversion",
    ],
)
