from setuptools import setup, find_packages

setup(
    name="jobshopsim",
    version="0.1.0",
    description="Discrete Event Simulator for Job-Shop Manufacturing Lines",
    author="JobShopSim Team",
    packages=find_packages(include=["jobshopsim", "jobshopsim.*", "configs"]),
    package_data={"configs": ["*.yaml", "examples/*.yaml"]},
    install_requires=[
        "numpy>=1.24.0",
        "pandas>=2.0.0",
        "pyyaml>=6.0",
        "matplotlib>=3.7.0",
        "seaborn>=0.12.0",
        "tqdm>=4.65.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": ["jobshopsim=jobshopsim.main:main"],
    },
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
    ],
)
