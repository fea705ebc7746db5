# Copyright (c) 2022-2024, mushroomfire in Beijing Institute of Technology
# This file is from the chillpy project, released under the BSD 3-Clause License.

from setuptools import setup

description = "Identify ice polymorphs and the largest ice cluster in water simulations with the CHILL and CHILL+ algorithms."
try:
    readme = []
    with open("README.rst", encoding="utf-8") as f:
        for i in range(25):
            readme.append(f.readline())
    readme = "".join(readme)
except Exception:
    readme = description


setup(
    name="chillpy",
    version="0.1.0",
    author="mushroomfire aka HerrWu",
    author_email="yongchao_wu@bit.edu.cn",
    description=description,
    long_description=readme,
    long_description_content_type="text/x-rst",
    packages=["chillpy"],
    zip_safe=False,
    license="BSD 3-Clause License",
    python_requires=">=3.8,<3.13",
    install_requires=[
        "taichi>=1.7.1",
        "numpy<2.0",
        "polars>=0.20.26",
        "tqdm",
    ],
    extras_require={
        "test": ["pytest"],
    },
    classifiers=[
        "License :: OSI Approved :: BSD License",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: Microsoft :: Windows",
        "Operating System :: POSIX :: Linux",
        "Operating System :: MacOS",
    ],
)
