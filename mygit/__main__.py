"""Entry point for running mygit as a module.

This module allows mygit to be run as a Python module using the -m flag:
    python -m mygit
"""

from . import cli

if __name__ == "__main__":
    cli._main()
