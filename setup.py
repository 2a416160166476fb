from setuptools import find_packages, setup

__version__ = "0.1.0"
VERSION = __version__

setup(
    name="wirebox",
    version=VERSION,
    description="an async dependency injection container for python",
    packages=find_packages(include=["wirebox", "wirebox.*"]),
    python_requires=">=3.9",
    install_requires=["typing_extensions>=4.4.0"],
    extras_require={"test": ["pytest>=8.0", "pytest-asyncio>=0.23"]},
    license="MIT",
)
