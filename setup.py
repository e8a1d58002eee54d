# flake8: noqa
from setuptools import setup, find_packages
from pathlib import Path

long_description = (Path(__file__).parent / "README.md").read_text()

exec(open("pathopop/version.py").read())

setup(
    name="pathopop-kit",
    version=__version__,
    description="Tool kits for population genetics of plant pathogens sampled across nurseries",
    packages=find_packages(exclude=["tests", "tests.*"]),
    setup_requires=["numpy>=1.10"],
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "pandas",
        "scipy",
        "matplotlib>=3.7",
        "dask[array]>=2021.11.2",
        "tqdm",
        "xarray",
        "zarr",
        "structlog",
        "fire",
        "scikit-allel",
    ],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["pathopop=pathopop.cli:cli"]},
    classifiers=[
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "Intended Audience :: Science/Research",
    ],
    long_description=long_description,
    long_description_content_type="text/markdown",
)
