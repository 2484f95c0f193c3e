# setup.py - 安装配置

from setuptools import setup, find_packages

setup(
    name="guess-number",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.8",
    install_requires=[],
    extras_require={
        "dev": [
            "black==23.9.1",
            "flake8==6.1.0",
            "isort==5.12.0",
            "pytest==7.4.0",
            "pytest-cov==4.1.0",
            "pre-commit==3.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "guess-server=guessgame.server.main:main",
            "guess-client=guessgame.client.main:main",
        ],
    },
)
