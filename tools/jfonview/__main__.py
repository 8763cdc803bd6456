"""
Entry point for running jfonview as a Python module.

This module enables the package to be executed directly via:
    python -m jfonview <command>
"""

from .cli import main

# Guard ensures this only runs when executed as a script, not when imported
if __name__ == "__main__":
    main()
