from setuptools import setup, find_packages

with open("Readme.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="plugin-reporter",
    version="1.0.0",
    author="Kobalt Digital",
    author_email="info@kobaltdigital.nl",
    description="Envoie l'inventaire des plugins d'un site au collecteur central et expose un endpoint sécurisé.",
    long_description=long_description,
    long_description_content_type='text/markdown',
    include_package_data=True,
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires='>=3.8',
    install_requires=[
        "requests>=2.28.0",
        "urllib3>=1.26.0",
        "Flask>=2.3.0",
        "schedule>=1.2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "responses>=0.23.0",
        ],
        "dev": [
            "black>=23.0.0",
            "flake8>=6.0.0",
        ],
    },

    entry_points='''
        [console_scripts]
        plugin-reporter=plugin_reporter.main:main
    '''
)
