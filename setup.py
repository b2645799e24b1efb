import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

with open('VERSION', 'r') as fh:
    VERSION = fh.read().strip()

setuptools.setup(
    name="hostinstall",
    version=VERSION,
    description="Host provisioning - MySQL Server and LXD installers for Debian based systems",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_namespace_packages(include=['hostinstall', 'hostinstall.*']),
    classifiers=[
        "Programming Language :: Python :: 3.12",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Operating System :: POSIX :: Linux",
    ],
    python_requires='>=3.11',
    install_requires=[
        'pydantic>=2',
        'PyYAML',
        'typing_extensions>=4.4',
    ],
    extras_require={
        'test': ['pytest'],
        'journald': ['systemd-python'],
    },
    entry_points={
        'console_scripts': [
            'hostinstall=hostinstall.main:main',
            'hostinstall-mysql=hostinstall.main:mysql',
            'hostinstall-lxd=hostinstall.main:lxd',
        ],
    },
)
