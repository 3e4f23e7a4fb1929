from setuptools import setup, find_packages


setup(
    name="boundrand",
    version="0.1",
    packages=find_packages(include=["boundrand", "boundrand.*"]),
    description="Uniform random integers below an exclusive bound, free of modulo bias.",
    author="vercingetorx",
    python_requires=">=3.8",
    install_requires=[
        "pycryptodomex>=3.23.0",
        "argon2-cffi>=23.1.0",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "boundrand=boundrand.cli:main",
        ]
    },
)
