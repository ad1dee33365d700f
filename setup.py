"""
/setup.py

Card-sort agreement analysis: similarity matrices, dendrograms and cluster
graphs for card-sorting sessions.
"""

import setuptools

with open("requirements.txt", "r", encoding="utf-8") as file:
    requirements = [
        line.strip()
        for line in file.read().splitlines()
        if line.strip() and not line.startswith("#")
    ]

setuptools.setup(
    name="cardsort-analysis",
    version="0.0.1",
    description="Agreement analysis for card-sorting sessions",
    package_dir={"": "src"},
    packages=setuptools.find_packages(where="src"),
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": [
            "cardsort-analyze = card_sort.commands:main",
        ]
    },
)
