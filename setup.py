#!/usr/bin/env python
import os

from setuptools import find_packages, setup
from setuptools.command.develop import develop
from setuptools.command.install import install


class InstallReqs(install):
    def run(self):
        print(" ************************* ")
        print(" *** Installing adikit *** ")
        print(" ************************* ")
        install.run(self)


class InstallDevReqs(develop):
    def run(self):
        print(" ******************************* ")
        print(" *** Installing adikit (dev) *** ")
        print(" ******************************* ")
        develop.run(self)


def resource(*args):
    return os.path.join(os.path.abspath(os.path.join(__file__, os.pardir)),
                        *args)


def parse_requirements(filename):
    """ Requirement specifiers of a requirements file, without comments. """
    with open(resource(filename)) as f:
        lines = (line.split('#')[0].strip() for line in f)
        return [line for line in lines if line and not line.startswith('-')]


requirements = parse_requirements('requirements.txt')
requirements_dev = parse_requirements('requirements-dev.txt')


setup(
    name='adikit',
    version='0.1.0',
    description='Angular differential imaging post-processing: PSF '
                'subtraction, detection maps and contrast curves',
    packages=find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.10',
    cmdclass={'install': InstallReqs,
              'develop': InstallDevReqs},
    install_requires=requirements,
    extras_require={"dev": requirements_dev,
                    "test": requirements_dev},
)
