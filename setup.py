from setuptools import setup, find_packages
import sys, os

here = os.path.abspath(os.path.dirname(__file__))
README = open(os.path.join(here, 'README.md')).read()
NEWS = open(os.path.join(here, 'NEWS.txt')).read()


version = '0.0.1'

install_requires = [
    'nmigen',
    'libresoc-nmutil',
    'bigfloat'
]

test_requires = [
    'pytest',
]

setup(
    name='cordicpipe',
    version=version,
    description="A nmigen (HDL) pipelined CORDIC sine/cosine engine",
    long_description=README + '\n\n' + NEWS,
    long_description_content_type='text/markdown',
    classifiers=[
        "Topic :: Software Development :: Libraries",
        "License :: OSI Approved :: GNU Lesser General Public License v3 or later (LGPLv3+)",
        "Programming Language :: Python :: 3",
    ],
    keywords='nmigen cordic sin cos',
    license='LGPLv3+',
    packages=find_packages('src'),
    package_dir = {'': 'src'},
    include_package_data=True,
    zip_safe=False,
    install_requires=install_requires,
    extras_require={'test': test_requires},
)
