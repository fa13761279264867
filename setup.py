"""setup for Cronos.

Install for development:
    pip install -e ".[test]"

Build a macOS .app bundle:
    pip install py2app
    python setup.py py2app
"""

import sys

from setuptools import setup

APP = ["main.py"]
DATA_FILES = []
OPTIONS = {
    "argv_emulation": False,
    "iconfile": None,  # Replace with .icns path when a proper icon exists
    "plist": {
        "CFBundleName": "Cronos",
        "CFBundleDisplayName": "Cronos",
        "CFBundleIdentifier": "com.cronos.app",
        "CFBundleVersion": "0.1.0",
        "CFBundleShortVersionString": "0.1.0",
        "NSHighResolutionCapable": True,
        "LSMinimumSystemVersion": "13.0",
    },
}

py2app_args = {}
if "py2app" in sys.argv:
    py2app_args = {
        "app": APP,
        "data_files": DATA_FILES,
        "options": {"py2app": OPTIONS},
        "setup_requires": ["py2app"],
    }

setup(
    name="Cronos",
    version="0.1.0",
    description="Interval routine runner with a drift-free countdown engine",
    packages=[
        "cronos",
        "cronos.audio",
        "cronos.database",
        "cronos.history",
        "cronos.platform",
        "cronos.routines",
        "cronos.timer",
        "cronos.ui",
    ],
    python_requires=">=3.10",
    install_requires=[
        "PyQt6>=6.5",
        "SQLAlchemy>=2.0",
        "numpy>=1.24",
        "loguru>=0.7",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "gui_scripts": ["cronos = cronos.__main__:main"],
    },
    **py2app_args,
)
