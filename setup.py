from setuptools import setup

setup(name='marginci',
      version='0.1.0',
      description='Confidence intervals on vote margins from partial '
                  'county counts',
      packages=['marginci'],
      python_requires='>=3.7',
      install_requires=[
          'numpy',
          'pandas',
          'scipy',
          'statsmodels',
          'loguru',
          'PyYAML',
          'mypy_extensions'
      ],
      extras_require={
          'test': ['pytest']
      })
