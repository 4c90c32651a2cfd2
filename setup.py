#!/usr/bin/env python3

from pathlib import Path
from setuptools import setup, find_packages

setup(
    name='stackview',
    version='0.3.0',
    author='The stackview authors',
    description='Render top and bottom side SVG previews from a zip of Gerber and Excellon files',
    long_description=Path('README.md').read_text(),
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=['tests']),
    include_package_data=True,
    install_requires=['click', 'quart', 'werkzeug', 'gerbonara>=1.5.0'],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'stackview = stackview.cli:cli',
        ],
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Console',
        'Environment :: Web Environment',
        'Intended Audience :: Developers',
        'Intended Audience :: Manufacturing',
        'License :: OSI Approved :: Apache Software License',
        'Natural Language :: English',
        'Operating System :: POSIX :: Linux',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3 :: Only',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Topic :: Printing',
        'Topic :: Scientific/Engineering :: Electronic Design Automation (EDA)',
        'Topic :: Utilities',
    ],
    keywords='gerber excellon pcb svg preview',
    python_requires='>=3.10',
)
