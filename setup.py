# Copyright 2021 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import os

import setuptools

requirements = [
    "pyelftools>=0.31",
    "pydantic>=2",
    "rich>=13",
    "colorama>=0.4.6",
]

# this sets __version__
# via: http://stackoverflow.com/a/7071358/87207
# and: http://stackoverflow.com/a/2073599/87207
with open(os.path.join("elfinfo", "version.py"), "r") as f:
    exec(f.read())


# via: https://packaging.python.org/guides/making-a-pypi-friendly-readme/
this_directory = os.path.abspath(os.path.dirname(__file__))
with open(os.path.join(this_directory, "README.md"), "r") as f:
    long_description = f.read()


setuptools.setup(
    name="elfinfo",
    version=__version__,
    description="Detect which compiler produced an ELF file, and which version of it.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=["tests"]),
    package_dir={"elfinfo": "elfinfo"},
    entry_points={
        "console_scripts": [
            "elfinfo=elfinfo.main:main",
        ]
    },
    include_package_data=True,
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=7.1.3",
            "pytest-sugar>=0.9.4",
            "pytest-instafail>=0.5.0",
            "pytest-cov>=4.0.0",
            "pycodestyle>=2.10.0",
            "black>=23.3.0",
            "isort>=5.11.4",
            "mypy>=1.1.1",
            # type stubs for mypy
            "types-colorama>=0.4.15",
        ],
    },
    zip_safe=False,
    keywords="elf compiler toolchain detection gcc clang go rust",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Information Technology",
        "License :: OSI Approved :: Apache Software License",
        "Natural Language :: English",
        "Programming Language :: Python :: 3",
        "Topic :: Software Development :: Compilers",
    ],
    python_requires=">=3.10",
)
