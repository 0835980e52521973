"""
Entry point for running camswitch as a module.

This allows running the package with: python -m camswitch
"""

from .cli import main

if __name__ == '__main__':
    main()
