#!/usr/bin/env python3
"""Entry point for pdfwatch CLI when run as python -m pdfwatch.cli."""

if __name__ == "__main__":
    from pdfwatch.cli.main import main

    main()
