"""Main entry point for the deployer CLI tool.

This module provides the main entry point for the command-line interface
of the release asset deployer.
"""

from deployer.cli import main

if __name__ == "__main__":
    main()
