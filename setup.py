# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="codecontext",
    version="0.1.0",
    description="Condense Rust source trees into compact context for language models",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["codecontext*"]),
    python_requires=">=3.9",
    install_requires=[
        "tree-sitter>=0.23",
        "tree-sitter-rust>=0.23",
        "tiktoken>=0.7",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'codecontext=codecontext.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
