from setuptools import setup, find_packages

setup(
    name="stepdriver",
    version="1.0.0",
    packages=find_packages(include=["stepdriver", "stepdriver.*"]),
    install_requires=[
        "pyyaml>=5.4",
        "jsonschema>=4.0.0",
        "pillow>=8.0.0",
        "numpy>=1.21",
        "opencv-python-headless>=4.5",
        "pytesseract>=0.3.8",
        "pywinauto>=0.6.8; sys_platform == 'win32'",
        "comtypes>=1.1.7; sys_platform == 'win32'",
        "pywin32>=300; sys_platform == 'win32'",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
    package_data={
        "stepdriver": ["schemas/*.json"],
    },
    entry_points={
        "console_scripts": [
            "stepdriver=stepdriver.cli:main",
        ],
    },
)
