from setuptools import find_packages, setup

setup(
    name="rest-tester",
    version="0.1.0",
    description="MCP server exposing a single tool that calls REST endpoints on a configured base URL",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.11",
    install_requires=[
        "mcp>=1.10,<2",
        "httpx>=0.27",
        "pydantic>=2.7",
        "anyio>=4.4",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "rest-tester=rest_tester.gateway.cli:main",
        ],
    },
)
