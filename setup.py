from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="pdf2dxf",
    version="1.0.0",
    description="Convert the vector graphics of PDF files to DXF drawings",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Topic :: Multimedia :: Graphics :: Graphics Conversion",
    ],
    python_requires=">=3.8",
    install_requires=[
        "PyMuPDF>=1.23.0",
        "pikepdf>=8.0.0",
        "ezdxf>=1.1.0",
        "click>=8.1.0",
        "tqdm>=4.65.0",
        "numpy>=1.24.0",
        "Pillow>=9.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "pdf2dxf=pdf2dxf.cli:main",
        ],
    },
    keywords="pdf dxf autocad cad converter vector graphics",
)
