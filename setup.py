from setuptools import setup, find_packages

setup(
    name="cbb-watchability",
    version="0.1.0",
    description="Ranks college basketball games by how worth watching they are, live and pregame",
    author="Ben Rosen",
    packages=find_packages(include=["watchability", "watchability.*"]),
    install_requires=[
        "pandas>=1.5.3",
        "pytz>=2022.7",
        "beautifulsoup4>=4.12.0",
        "lxml>=4.9.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "watchability=watchability.main:main",
        ],
    },
)
