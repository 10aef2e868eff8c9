"""Package setup for neufbox_watcher."""

from setuptools import setup, find_packages

setup(
    name="neufbox-watcher",
    version="0.2.0",
    description="Check the ADSL connection of a Neufbox 4 router and reboot it when down",
    packages=find_packages(include=["neufbox_watcher", "neufbox_watcher.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.31.0",
        "beautifulsoup4>=4.12.0",
        "lxml>=5.0.0",
        "python-dotenv>=1.0.0",
        "tqdm>=4.66.0",
        "colorlog>=6.8.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "neufbox-watcher=neufbox_watcher.cli:main",
        ],
    },
)
