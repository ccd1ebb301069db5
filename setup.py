import os
from setuptools import setup, find_packages

def get_version():
    ZEDSAVE_VERSION="1.0+unknown"
    if 'ZEDSAVE_VERSION' in os.environ:
        ZEDSAVE_VERSION=os.environ['ZEDSAVE_VERSION']
    return ZEDSAVE_VERSION

setup(
    name='zedsave',
    version=get_version(),
    description='Save depth maps and point clouds from a ZED stereo camera or SVO recording',
    packages=find_packages(include=['zedsave', 'zedsave.*']),
    python_requires='>=3.9',
    install_requires=[
        'numpy',
        'opencv-python',
        'open3d',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'zedsave=zedsave.__main__:main',
            'zedsave_depth=zedsave.scripts.zedsave_depth:main',
        ],
    },
)
