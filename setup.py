from setuptools import setup, find_packages

setup(
    name="snfintel",
    version="1.2.0",
    packages=find_packages(include=["snfintel", "snfintel.*"]),
    install_requires=[
        "pandas>=2.0",
        "numpy>=1.24",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "snfintel=snfintel.cli:main",
        ],
    },
    python_requires=">=3.10",
    description="Derived statistics and narrative engine for SNF portfolio dashboards",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ]
)
