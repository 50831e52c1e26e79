from setuptools import setup, find_packages

setup(
    name='unbrowserify',
    version='0.1.0',
    py_modules=['unbrowserify', 'extractor'],
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'lark',
        'pydantic',
        'requests',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'unbrowserify = unbrowserify:main',
        ],
    },
)
