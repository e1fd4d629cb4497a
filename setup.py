"""Setup configuration for Vigil Discord Bot."""

from setuptools import setup, find_packages

setup(
    name="vigil",
    version="0.0.1",
    description="A Discord bot for screening new accounts and verifying suspicious members",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "py-cord",
        "python-dotenv",
        "PyYAML",
        "aiosqlite",
        "prompt_toolkit",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "vigil=vigil.main:main",
        ],
    },
)
