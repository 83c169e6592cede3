from setuptools import find_packages, setup

setup(
    name="fwatcher",
    version="0.3.0",
    description="Auto run a command when watched files change",
    author="Araray Velho",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    python_requires=">=3.8",
    install_requires=[
        "click",
        "toml",
        "pyyaml",
        "rich",
        "psutil",
        "watchdog",
        "pathspec>=0.10",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "fwatcher=fwatcher.cli:entry"
        ]
    },
)
