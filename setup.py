from setuptools import setup, find_packages

setup(
    name="chatstream",
    version="0.1.0",
    description="Streaming segmentation and markdown preview balancing for LLM chat responses",
    packages=find_packages(include=["chatstream", "chatstream.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0",
        "rich>=13.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "chatstream=chatstream.cli:main",
        ],
    },
)
