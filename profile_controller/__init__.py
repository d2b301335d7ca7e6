# This version is replaced during release process.
__version__ = "2020.1.0.dev0"
