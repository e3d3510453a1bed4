from setuptools import setup, find_packages

setup(
    name="profile-nickname-commons",
    version="1.0.0",
    description="Nickname validation, availability checking and updates for profile services",
    author="Profiles Team",
    packages=find_packages(include=["nickname_commons", "nickname_commons.*"],
                           exclude=["*.tests", "*.tests.*"]),
    install_requires=[
        "boto3>=1.34.0",
        "pynamodb>=6.0.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.23.0",
            "pytest-cov>=4.1.0",
            "moto>=5.0.0",
        ],
    },
    python_requires=">=3.12",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.12",
    ],
)
