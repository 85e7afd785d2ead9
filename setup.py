import setuptools

try:
    with open("README.md", "r", encoding="utf-8") as fh:
        long_description = fh.read()
except FileNotFoundError:
    long_description = "Manage local AWS Lambda Go functions and their SAM manifests"

setuptools.setup(
    name="lambda-workbench",
    version="0.1.0",
    description="Manage local AWS Lambda Go functions and their SAM manifests",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=setuptools.find_packages(where="src", include=["lambda_workbench", "lambda_workbench.*"]),
    install_requires=[
        "pydantic>=2.11",
        "python-dotenv>=1.0",
        "PyYAML>=6.0",
        "questionary>=2.0",
        "rich>=13.0",
        "typer>=0.12",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "lwb=lambda_workbench.cli.main:app",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.10",
)
