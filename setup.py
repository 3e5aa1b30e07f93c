from setuptools import setup, Extension, find_packages
from Cython.Build import cythonize
import numpy as np

extensions = [
    Extension(
        name="trialign._cython.trialign_dp",
        sources=["trialign/_cython/trialign_dp.pyx"],
        include_dirs=[np.get_include()],
    )
]

setup(
    name="trialign",
    version="0.1.0",
    description="Optimal three-way sequence alignment as a highest-weight path in a DAG",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    packages=find_packages(include=["trialign", "trialign.*"]),
    ext_modules=cythonize(extensions, language_level=3),

    install_requires=[
        "numpy",
        "loguru",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov",
        ],
        "test": [
            "pytest>=7.0",
            "pytest-cov",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
    ],
    python_requires='>=3.11',
)
