from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="e2e-training-suite",
    version="1.0.0",
    description="End-to-end testing training suites built on Playwright and pytest",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["e2e_training", "e2e_training.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Testing",
        "Framework :: Pytest",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=requirements,
    entry_points={
        "console_scripts": [
            "e2e-run=e2e_training.runner:main",
            "e2e-merge-reports=e2e_training.runner:merge_main",
            "e2e-demo-site=e2e_training.demo_site:main",
        ],
    },
)
