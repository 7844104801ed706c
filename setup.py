"""setuptools setup for Age of Focus.

Install for development:
    pip install -e ".[test]"
    pytest
"""

from setuptools import setup, find_namespace_packages

setup(
    name="AgeOfFocus",
    version="0.1.0",
    description="Focus timer that banks break time and drives a strategy game.",
    packages=find_namespace_packages(include=["ageoffocus", "ageoffocus.*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyQt6",
        "SQLAlchemy>=2.0",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "ageoffocus = ageoffocus.__main__:main",
        ],
    },
)
