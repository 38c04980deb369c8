from setuptools import find_packages, setup

setup(
    name="neurosignals",
    version="0.3.0",
    description="Spectral, statistical and information-theoretic analytics for epoched biosignal recordings.",
    author="Araray Velho",
    author_email="araray@gmail.com",
    packages=find_packages(include=["neurosignals", "neurosignals.*"]),
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "scipy",
        "pandas",
        "scikit-learn",
        "pydantic>=2",
        "toml",
        "rich",
        "pywavelets",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
)
