"""
fieldrules CLI Entry Point
==========================

Allows running fieldrules as a module: python -m fieldrules
"""

from fieldrules.cli.main import main

if __name__ == "__main__":
    main()
