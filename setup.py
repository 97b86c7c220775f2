from setuptools import setup, find_packages
import re

# Read version from drivegate/__init__.py
with open('drivegate/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='drivegate',
    version=version,
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'google-api-python-client',
        'google-auth',
        'google-auth-oauthlib',
        'python-dotenv',
        'click>=8.0',
        'PyYAML',
        'fastapi',
        'uvicorn',
        'python-multipart',
        'pydantic>=2',
        'tenacity',
    ],
    extras_require={
        'test': ['pytest', 'httpx'],
    },
    entry_points={
        'console_scripts': [
            'drivegate=drivegate.cli.__main__:main',
        ],
    },
    python_requires='>=3.9',
    author='drivegate developers',
    description='HTTP gateway for Google Drive file and folder storage.',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
)
