import re
from pathlib import Path

from setuptools import find_packages, setup


VERSION_REGEX = r'^__version__\s*=\s*[\'"]([^\'"]*)[\'"]'

init = Path(__file__).with_name("src") / "crtchallenge" / "__init__.py"
readme = Path(__file__).with_name("README.rst")
version_match = re.search(VERSION_REGEX, init.read_text("utf-8"), re.MULTILINE)

if version_match:
    version = version_match.group(1)
else:
    raise RuntimeError("Cannot find version information")

setup(
    name="crtchallenge",
    version=version,
    description="HMAC-authenticated challenge envelope for crtauth",
    long_description=readme.read_text("utf-8"),
    long_description_content_type="text/x-rst",
    packages=find_packages("src"),
    package_dir={"": "src"},
    license="Apache-2.0",
    keywords=["crtauth", "authentication", "challenge-response", "hmac", "msgpack"],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Natural Language :: English",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: Implementation :: CPython",
        "Programming Language :: Python :: Implementation :: PyPy",
        "Topic :: Security",
    ],
    python_requires=">=3.9",
    extras_require={
        "docs": ["sphinx", "sphinx_autodoc_typehints"],
        "testing": ["hypothesis", "pytest", "pytest-cov"],
    },
)
