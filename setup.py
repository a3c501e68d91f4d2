from setuptools import setup

from deployregression import __version__

DEPENDENCIES = [
    "colorama>=0.4.1",
    "configobj>=5.0.6",
    "mozinfo>=1.1.0",
    "mozlog>=4.0",
    "redo>=2.0.2",
    "requests>=2.21.0",
]

TEST_DEPENDENCIES = [
    "mock",
    "pytest",
    "pytest-mock",
    "mozfile",
]

desc = """Regression range finder for production deployments"""
long_desc = """Regression range finder for production deployments.

Bisects the production deployment history of a project, between a known
good and a known bad deployment, to find the first bad one. Each tested
deployment is classified by hand or by running a test command."""

setup(
    name="deployregression",
    version=__version__,
    description=desc,
    long_description=long_desc,
    license="MPL 2.0",
    packages=["deployregression"],
    entry_points="""
          [console_scripts]
          deployregression = deployregression.main:main
        """,
    platforms=["Any"],
    python_requires=">=3.6",
    install_requires=DEPENDENCIES,
    extras_require={"test": TEST_DEPENDENCIES},
    classifiers=[
        "License :: OSI Approved :: Mozilla Public License 2.0 (MPL 2.0)",
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3 :: Only",
    ],
)
