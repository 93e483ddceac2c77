from setuptools import setup, find_packages

from thymescan.config.package import PACKAGE_NAME, PACKAGE_VERSION, PACKAGE_DESCRIPTION, PACKAGE_AUTHOR, \
    PACKAGE_AUTHOR_EMAIL, PACKAGE_LICENSE

setup(
    name=PACKAGE_NAME,
    version=PACKAGE_VERSION,
    description=PACKAGE_DESCRIPTION,
    author=PACKAGE_AUTHOR,
    author_email=PACKAGE_AUTHOR_EMAIL,
    packages=find_packages(exclude=['tests', 'tests.*']),
    include_package_data=True,
    python_requires='>=3.10',
    install_requires=[
        'beautifulsoup4',
        'cookiecutter',
        'questionary',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'thymescan=thymescan.main:main',
        ],
    },
    license=PACKAGE_LICENSE,
)
