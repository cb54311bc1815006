from setuptools import setup, find_packages

setup(
    name="scppg",
    version="0.1.0",
    description="Smartphone-camera PPG signal extraction from raw YUV frames",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main"],
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.24",
        "opencv-python>=4.8",
    ],
    extras_require={
        "dev": ["pytest>=7.4"],
    },
    entry_points={
        "console_scripts": [
            "scppg-monitor=main:main",
        ]
    },
)
