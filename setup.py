from setuptools import setup, find_packages

setup(
    name="envconfig",
    version="0.1.0",
    description="Reflection-based binding of environment variables into dataclasses",
    packages=find_packages(include=["envconfig", "envconfig.*"]),
    install_requires=[
        "python-dotenv>=1.0.0",
        "pydantic>=2.0.0",
        "structlog>=23.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    python_requires=">=3.11",
)
