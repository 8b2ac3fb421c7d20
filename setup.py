from setuptools import setup

setup(
    name="assetlink",
    version="0.1.0",
    description="Deferred resolution and naming of assets referenced by templates",
    license="MIT",
    packages=["assetlink"],
    python_requires=">=3.8",
    install_requires=[
        "Jinja2>=3,<4",
        "MarkupSafe>=2",
        "PyYAML>=5.1",
        "requests>=2,<3",
    ],
    extras_require={"test": ["pytest>=7"]},
    entry_points={"console_scripts": ["assetlink = assetlink.cli:main"]},
)
