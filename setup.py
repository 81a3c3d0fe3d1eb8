"""
Setup script for curtiz.

Curtiz is a terminal spaced-repetition tool for Japanese sentences:

1. Parse - segment sentences kept in Markdown into cloze quizzes
2. Learn - attach a Bayesian recall model to every quiz of a sentence
3. Quiz - review whichever quiz is most likely forgotten

The annotated Markdown files are the only store.
"""

from setuptools import find_packages, setup

setup(
    name="curtiz",
    version="1.0.0",
    description="Spaced repetition for Japanese sentences kept in Markdown",
    packages=find_packages(include=["curtiz", "curtiz.*"]),
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "curtiz=curtiz.cli:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning spaced-repetition cli japanese cloze",
)
