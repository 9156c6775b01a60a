from setuptools import find_namespace_packages, setup

setup(
    name="ci-split",
    version="0.1",
    description="Balance test files across parallel CI nodes using past test timings",
    packages=find_namespace_packages(include=["ci_split", "ci_split.*"], exclude=["ci_split.pytests*"]),
    python_requires=">=3.10",
    install_requires=[
        "click>=8.2",
        "junitparser>=3.0,<4",
        "lxml",
        "structlog>=21.2",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "ci-split = ci_split.cli:cli",
            "merge-junit-xml = ci_split.cli:merge_junit_xml",
        ]
    },
    zip_safe=False,
)
