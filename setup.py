"""
SQLAlchemy dialect and DB-API driver for the AWS RDS Data API
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="sqlalchemy-dataapi",
    version="1.0.0",
    author="sqlalchemy-dataapi Contributors",
    description="SQLAlchemy dialect and DB-API driver for the AWS RDS Data API",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Database",
        "Topic :: Database :: Front-Ends",
    ],
    python_requires=">=3.9",
    install_requires=[
        "boto3>=1.28.0",
        "sqlalchemy>=2.0.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
    entry_points={
        "sqlalchemy.dialects": [
            "dataapi = sqlalchemy_dataapi.dialect:DataAPIDialect",
        ],
    },
    keywords=[
        "sqlalchemy",
        "dialect",
        "dbapi",
        "aws",
        "rds",
        "data-api",
        "aurora",
    ],
)
