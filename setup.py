from setuptools import setup, find_packages

setup(
    name="redis-sampler",
    version="0.1.0",
    description="Statistical profiling of a Redis keyspace by random key sampling",
    author="adamfilli",
    packages=find_packages(include=["redissampler", "redissampler.*"]),
    install_requires=[
        "redis",
        "matplotlib",
        "pandas",
    ],
    extras_require={
        "test": [
            "pytest",
            "fakeredis",
        ],
    },
    entry_points={
        "console_scripts": [
            "redis-sampler=redissampler.cli:main",
        ],
    },
    include_package_data=True,
    python_requires=">=3.11",
)
