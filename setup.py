from setuptools import setup, find_packages

setup(
    name="fuzzycontrol",
    version="0.1.0",
    description="Fuzzy-inference engine for piecewise-linear rule bases with FCL read/write",
    author="fundthmcalculus",
    package_dir={"": "src"},
    packages=find_packages("src"),
    install_requires=["numpy", "joblib", "tqdm", "plotly"],
    extras_require={"test": ["pytest"]},
    python_requires=">=3.10",
    license="MIT",
)
