import os
from typing import Dict, Final, List

from setuptools import setup, find_packages

__lib_name__: Final[str] = "stringslice"
__version__: Final[str] = open("VERSION", "r").read().strip()

this_directory = os.path.abspath(os.path.dirname(__file__))
with open(os.path.join(this_directory, "README.md"), "r", encoding="utf-8") as f:
    long_description = f.read()

install_requires: List[str] = [
    "structlog>=23.1",  # logging of allocating operations and CLI diagnostics
]
extras_require: Dict[str, List[str]] = {
    "test": [
        "pytest",
        "numpy",  # buffer protocol interop tests, skipped when missing
    ],
    "bench": [
        "fire",
    ],
}
entry_points = {
    "console_scripts": [
        "ss_split=cli.split:main",
        "ss_wc=cli.wc:main",
    ],
}

setup(
    name=__lib_name__,
    version=__version__,
    description="Zero-copy byte and UTF-8 string slices: search, split, compare, and iterate without copying",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="Apache-2.0",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Natural Language :: English",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Programming Language :: Python :: Implementation :: CPython",
        "Programming Language :: Python :: Implementation :: PyPy",
        "Operating System :: OS Independent",
        "Topic :: Text Processing :: General",
    ],
    python_requires=">=3.8",
    packages=find_packages(include=["stringslice", "stringslice.*", "cli"]),
    install_requires=install_requires,
    extras_require=extras_require,
    entry_points=entry_points,
)
