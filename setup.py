#!/usr/bin/env python
"""Azure CLI Extension: az ideafy — stream and display startup-idea analyses."""

from setuptools import find_packages, setup

VERSION = "0.1.0b1"
CLASSIFIERS = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "License :: OSI Approved :: MIT License",
]

DEPENDENCIES = [
    "knack>=0.11.0",
    "pyyaml>=6.0",
    "requests>=2.28.0",
    "rich>=13.0.0",
    # prompt_toolkit for the multi-line idea description (Esc+Enter, backslash continuation)
    "prompt_toolkit>=3.0.0",
    # Page count and validation of the optional PDF attachment
    "pypdf>=4.0",
]

setup(
    name="ideafy",
    version=VERSION,
    description="Azure CLI extension that streams startup-idea analyses and renders the results",
    long_description="Validate an idea, review its legal risks and SWOT, and read the overall summary from the terminal.",
    license="MIT",
    author="Ideafy",
    author_email="",
    url="https://ideafy-blue.vercel.app",
    classifiers=CLASSIFIERS,
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=DEPENDENCIES,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "azure.cli.extensions": [
            "ideafy=azext_ideafy",
        ]
    },
)
