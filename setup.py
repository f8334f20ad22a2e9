from setuptools import setup, find_packages

setup(
    name="fieldpost",
    version="0.1.0",
    description="Post-solution analysis of solved 2D triangular finite-element field problems",
    author="fieldpost developers",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.20",
        "scipy>=1.12",
    ],
    extras_require={
        "io": ["meshio>=5.0"],
        "dev": ["pytest>=6.0", "meshio>=5.0"],
    },
)
