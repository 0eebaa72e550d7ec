from setuptools import find_packages, setup

setup(
    name="moving-band",
    version="0.1.0",
    description="Air-gap moving-band descriptors for rotating electrical machine FE models",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "meshio",
        "h5py",
        "matplotlib",
        "pyyaml",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "moving-band=moving_band.cli.build_band:main",
        ],
    },
)
