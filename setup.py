"""Setup script for ytwebsub."""

from pathlib import Path

from setuptools import find_packages, setup

with Path("README.md").open() as file:
    long_description = file.read()

setup(
    name="ytwebsub",
    version="1.0.0",
    packages=find_packages(include=["ytwebsub", "ytwebsub.*"]),
    description="PubSubHubbub (WebSub) client and callback server for YouTube "
    "channel feeds",
    long_description=long_description,
    long_description_content_type="text/markdown",
    install_requires=[
        "fastapi~=0.115.0",
        "httpx~=0.28.1",
        "uvicorn~=0.34.0",
        "xmltodict~=0.14.2",
        "python-dotenv~=1.0",
        "typing_extensions>=4.5; python_version < '3.12'",
    ],
    extras_require={
        "test": [
            "pytest~=8.3",
            "pytest-asyncio~=0.25",
            "respx~=0.22.0",
        ],
    },
    license="MIT",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.11",
)
