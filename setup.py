"""Install the cardbase contribution pipeline package.

This does not include the other python code in this git repo, like the
database bootstrap script.
"""

from setuptools import setup, find_namespace_packages

setup(
    name='cardbase-crowdsource',
    version='0.1.0',
    package_dir={'': 'core'},
    packages=find_namespace_packages(where='core', include=['cardbase.*']),
    zip_safe=False,
    python_requires='>=3.8',
    install_requires=[
        'flask>=2.2',
        'bleach',
        'unidecode',
        'python-dateutil',
        'sqlalchemy>=2.0',
        'flask-sqlalchemy>=3.0',
        'retry==0.9.2',
        'pytz',
    ],
    extras_require={
        'mysql': ['mysqlclient'],
        'test': ['pytest'],
    },
    include_package_data=True
)
