from __future__ import annotations

from setuptools import find_packages, setup  # type: ignore


setup(
    name="badgereg",
    version="0.1.0",
    description="Fee-gated badge registry: names and addresses bound to numbered records, with an HTTP API",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages("src"),
    install_requires=[
        "fastapi>=0.110",
        "uvicorn>=0.27",
        "httpx>=0.27",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": [
            "badgereg=badgereg.__main__:main",
        ],
    },
)
