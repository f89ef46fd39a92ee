from setuptools import setup, find_packages
import re

# Read version from outlook_cli/__init__.py
with open('outlook_cli/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='outlook-cli',
    version=version,
    packages=find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.8',
    install_requires=[
        'msal>=1.20',
        'requests',
        'python-dotenv',
        'click>=8.0',
        'PyYAML',
        'click_option_group',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'outlook=outlook_cli.cli.__main__:main',
        ],
    },
    author='CLI Developer',
    description='outlook-cli - command-line access to Outlook mail through Microsoft Graph.',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
)
