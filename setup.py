from setuptools import setup, find_packages

setup(
    name="excdetail",
    version="1.0.0",
    author="excdetail contributors",
    description="Structured, serializable capture of Python exception chains",
    long_description=open("README.md", encoding="UTF-8").read(),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    classifiers = [
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    install_requires = ["html5tagger>=1.2.1"],
    extras_require = {"test": ["pytest", "coverage"]},
    include_package_data = True,
)
