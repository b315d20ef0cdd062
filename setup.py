from setuptools import setup

setup(
    name='atmfjstc-binary-decode',
    version='1.0.0',

    author_email='atmfjstc@protonmail.com',

    package_dir={'': 'src'},
    packages=['atmfjstc.lib.binary_decode'],

    install_requires=[],

    extras_require={
        'test': [
            'pytest',
        ],
    },

    zip_safe=True,

    description="Composable decoders for little-endian structured binary data (lists, grids, padded records, "
                "zlib sections)",

    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Topic :: System :: Archiving :: Compression",
        "Typing :: Typed",
    ],
    python_requires='>=3.7',
)
