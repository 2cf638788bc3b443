#!/usr/bin/env python

from setuptools import setup, find_packages

import radsim

setup(name='radsim',
      version=radsim.__version__,
      url=radsim.__url__,
      license='BSD',
      description='RADIUS accounting traffic simulator',
      long_description=open('README.rst').read(),
      classifiers=[
          'Development Status :: 4 - Beta',
          'Intended Audience :: System Administrators',
          'License :: OSI Approved :: BSD License',
          'Programming Language :: Python :: 3.12',
          'Programming Language :: Python :: 3.13',
          'Topic :: System :: Networking :: Monitoring',
          'Topic :: System :: Systems Administration :: Authentication/Directory',
      ],
      packages=find_packages(),
      package_data={'radsim': ['dictionary']},
      keywords=['radius', 'accounting', 'load testing'],
      python_requires='>=3.10',
      install_requires=['pyrad>=2.4', 'netaddr'],
      extras_require={'test': ['pytest']},
      entry_points={'console_scripts': ['radsim = radsim.cli:main']},
      zip_safe=False,
      include_package_data=True,
      )
