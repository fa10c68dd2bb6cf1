"""Setup for the Complaint Management API and Python SDK."""

from setuptools import find_packages, setup

setup(
    name="complaint-management",
    version="0.1.0",
    description="Complaint Management API and Python SDK",
    packages=find_packages(include=["complaint_api", "complaint_api.*", "complaint_sdk", "complaint_sdk.*"]),
    install_requires=[
        "fastapi>=0.110.0",
        "uvicorn[standard]>=0.27.0",
        "python-multipart>=0.0.9",
        "sqlalchemy>=2.0.0",
        "alembic>=1.13.0",
        "psycopg2-binary>=2.9.9",
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",
        "passlib[bcrypt]>=1.7.4",
        "bcrypt>=4.0.1,<4.1",
        "python-jose[cryptography]>=3.3.0",
        "minio>=7.2.0",
        "urllib3>=1.26.0",
        "prometheus-client>=0.19.0",
        "click>=8.1.0",
        "requests>=2.31.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "httpx>=0.26.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "complaint-api=complaint_api.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
