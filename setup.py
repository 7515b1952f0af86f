from setuptools import setup, find_packages
import re

# Read version from lesaudit/__init__.py
with open('lesaudit/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='les-audit',
    version=version,
    packages=find_packages(include=['lesaudit', 'lesaudit.*']),
    install_requires=[
        'pydantic>=2.0.0',
        'PyYAML>=6.0',
        'click>=8.0',
        'rich>=13.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'les-audit=lesaudit.cli.__main__:main',
        ],
    },
    author='Personal',
    description='Military pay statement (LES) reconciliation against expected pay.',
    python_requires='>=3.10',
)
