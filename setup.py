# -*- coding: utf-8 -*-
#
#    LinOTP - the open source solution for two factor authentication
#    Copyright (C) 2010-2019 KeyIdentity GmbH
#    Copyright (C) 2019-     netgo software GmbH
#
#    This file is part of LinOTP server.
#
#    This program is free software: you can redistribute it and/or
#    modify it under the terms of the GNU Affero General Public
#    License, version 3, as published by the Free Software Foundation.
#
#    This program is distributed in the hope that it will be useful,
#    but WITHOUT ANY WARRANTY; without even the implied warranty of
#    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#    GNU Affero General Public License for more details.
#
#    You should have received a copy of the
#               GNU Affero General Public License
#    along with this program.  If not, see <http://www.gnu.org/licenses/>.
#
#
#    E-mail: info@linotp.de
#    Contact: www.linotp.org
#    Support: www.linotp.de
#

import os

from setuptools import find_packages, setup

from mfaotp import __version__

# Taken from kennethreitz/requests/setup.py
package_directory = os.path.realpath(os.path.dirname(__file__))

# mfaotp runtime dependencies
# install with
# > pip install -e .
install_requirements = [
    "requests",
    # click=8.2 separates stdout and stderr of the CliRunner results
    "click>=8.2",
    # the [png] extra pulls in pypng for the PyPNGImage factory
    "qrcode[png]",
]

# Additional packages useful to improve and guarantee
# code quality
# > pip install -e ".[code_quality]"
code_quality_requirements = [
    "pylint",
    "autopep8",
    "black",
    "pre-commit",
    "mypy",
    "types-requests",
    "isort",
]

# Requirements needed to run all the tests
# install with
# > pip install -e ".[test]"
test_requirements = [
    "pytest",
    "pytest-cov",
    "mock",
    "freezegun",
    "coverage",
]

# all packages that are required during development of mfaotp
# install with
# > pip install -e ".[develop]"
development_requirements = test_requirements + code_quality_requirements


with open(os.path.join(package_directory, "README.md"), encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="mfaotp",
    version=__version__,
    description=(
        "One time passwords for multi-factor authentication: "
        "HOTP, TOTP and Yubico OTP validation"
    ),
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="AGPL v3",
    python_requires=">=3.10",
    install_requires=install_requirements,
    extras_require={
        "test": test_requirements,
        "code_quality": code_quality_requirements,
        "develop": development_requirements,
    },
    packages=find_packages(),
    include_package_data=True,
    scripts=[],
    classifiers=[
        "License :: OSI Approved :: GNU Affero General Public License v3",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3.11",
        "Topic :: Security",
        "Topic :: System :: Systems Administration :: Authentication/Directory",
    ],
    zip_safe=False,
    entry_points={
        "console_scripts": [
            "mfaotp = mfaotp.cli:main",  # mfaotp command line interface
        ],
    },
)
