from setuptools import find_packages, setup

setup(
    name="ci-builds",
    version="0.1.0",
    packages=find_packages(
        include=[
            "ci_common",
            "ci_common.*",
            "ci_builds",
            "ci_builds.*",
            "ci_client",
            "ci_client.*",
        ]
    ),
    install_requires=[
        "requests>=2.31.0",
        "click>=8.2.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-xdist>=3.3.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "ci-builds=ci_client.cli:main",
        ],
    },
    python_requires=">=3.11",
)
