from os import path
from setuptools import find_packages, setup

version_info = {}
with open("catcode/_version.py") as version_file:
    exec(version_file.read(), version_info)

PWD = path.abspath(path.dirname(__file__))
with open(path.join(PWD, "README.md"), encoding="utf-8") as readme:
    long_description = readme.read()

setup(
    name="catcode",
    version=version_info["__version__"],
    author=version_info["__author__"],
    author_email=version_info["__author_email__"],
    description="Contrasts matrices for coding categorical variables.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Scientific/Engineering :: Mathematics",
    ],
    packages=find_packages(exclude=("tests",)),
    python_requires=">=3.8",
    install_requires=[
        "interface_meta>=1.2",
        "numpy>=1.3",
        "pandas>=1.2",
        "scipy>=1.6",
        "typing_extensions>=4.0",
    ],
    extras_require={
        "test": [
            "black",
            "flake8",
            "pytest>=6.2.5",
            "pytest-cov",
        ],
    },
)
