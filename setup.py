from pathlib import Path

import setuptools

this_directory = Path(__file__).parent
long_description = (this_directory / "README.rst").read_text()

test_dependencies = ["pytest", "pandas"]


setuptools.setup(
    name="modeseek",
    version="0.1.0",
    author="modeseek contributors",
    description="Mean shift clustering on top of an exact k-d tree.",
    long_description=long_description,
    long_description_content_type="text/x-rst",
    packages=["modeseek"],
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: MIT License",
        "Operating System :: Unix",
        "Operating System :: MacOS",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
    ],
    keywords="clustering mean shift mode seeking kernel density k-d tree nearest neighbors",
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.18",
        "scipy",
        "scikit-learn",
        "joblib",
        "tqdm",
        "typer",
    ],
    test_suite="pytest",
    tests_require=test_dependencies,
    extras_require={"test": test_dependencies},
)
