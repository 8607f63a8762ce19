"""
setup.py for the WaveLoader package.

Usage:
    pip install -e .[test]
"""
import re
from pathlib import Path

from setuptools import find_packages, setup

VERSION_FILE = Path(__file__).parent / "waveloader" / "__version__.py"
VERSION = re.search(r'^__version__ = "([^"]+)"', VERSION_FILE.read_text(), re.M).group(1)

setup(
    name="waveloader",
    version=VERSION,
    description="Circular wave-fill progress widget for pygame",
    packages=find_packages(include=["waveloader", "waveloader.*"]),
    package_data={"waveloader": ["config/*.yaml"]},
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "pygame>=2.1.3",
        "numpy",
        "Pillow",
        "PyYAML",
        "pydantic>=2",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
