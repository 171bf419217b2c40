from setuptools import setup, find_packages

setup(
    name="qlsbridge",
    version="1.0.0",
    description="Aggregation bridge in front of the QLStats ranking API",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "fastapi",
        "uvicorn",
        "pydantic>=2",
        "httpx",
        "python-dotenv",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "qlsbridge=qlsbridge.__main__:main",
        ],
    },
    python_requires=">=3.8",
)
