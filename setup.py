from setuptools import setup, find_packages
# To use a consistent encoding
from codecs import open
from os import path


here = path.abspath(path.dirname(__file__))

# Get the long description from the README file
with open(path.join(here, 'README.rst'), encoding='utf-8') as f:
    long_description = f.read()


# Arguments marked as "Required" below must be included for upload to PyPI.
# Fields marked as "Optional" may be commented out.

setup(
    name='aprioriminer',
    version='1.0.0',
    description='Frequent itemset and association rule mining with the Apriori algorithm',
    long_description=long_description,
    license='GNU',
    packages=find_packages(exclude=['contrib', 'docs', 'tests', 'tests.*']),
    install_requires=['pandas', 'numpy', 'joblib'],
    extras_require={
        'test': ['pytest', 'scipy'],
    },
    python_requires='>=3.7',
)
