"""
Setup configuration for the camswitch package.
"""

import platform
from setuptools import setup, find_packages

# Read README for long description
try:
    with open("README.md", "r", encoding="utf-8") as fh:
        long_description = fh.read()
except FileNotFoundError:
    long_description = "Discover cameras, name them, and switch between them"


def get_platform_dependencies():
    """Get platform-specific dependencies based on the current system."""
    deps = []

    system = platform.system().lower()

    if system == "linux":
        # Built-in and USB cameras are enumerated through udev
        deps.extend([
            "pyudev>=0.21.0",
        ])

    return deps


def get_extras():
    """Get optional dependency groups."""
    extras = {
        "tui": [
            "textual>=0.41.0",  # Terminal UI framework
        ],
        "dev": [
            "pytest>=6.0",
            "pytest-cov>=2.0",
            "pytest-mock>=3.0",
            "black>=22.0",
            "flake8>=4.0",
            "mypy>=0.900",
            "types-click>=7.0",
            "ruff>=0.1.0",
        ],
        "test": [
            "pytest>=6.0",
            "pytest-cov>=2.0",
            "pytest-mock>=3.0",
            "pytest-xdist>=2.0",
        ],
    }

    extras["all"] = [
        "textual>=0.41.0",
        "pyudev>=0.21.0; sys_platform == 'linux'",
    ]

    return extras


# Core dependencies required on all platforms
install_requires = [
    "click>=8.0.0",  # CLI framework
] + get_platform_dependencies()

setup(
    name="camswitch",
    version="0.1.0",
    author="camswitch Development Team",
    description="Discover cameras, name them, and switch between them",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Video :: Capture",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    keywords="camera usb bluetooth video capture switcher",
    python_requires=">=3.8",
    install_requires=install_requires,
    extras_require=get_extras(),
    entry_points={
        "console_scripts": [
            "camswitch=camswitch.cli:main",
        ],
    },
    zip_safe=False,
)
