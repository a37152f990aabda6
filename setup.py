from setuptools import setup, find_packages

setup(
    name="earwig",
    version="0.1.0",
    description="Push-to-talk voice memo daemon with transcription and phone notifications",
    author="",
    python_requires=">=3.8",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyaudio>=0.2.11",
        "numpy>=1.21.0",
        "evdev>=1.6.0",
        "pyyaml>=6.0.0",
        "pypubsub>=4.0.3",
        "aiohttp>=3.8.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "earwig=earwig.main:main",
        ],
    },
)
