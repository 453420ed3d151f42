"""Entry point for ``python -m pdfwatch``."""

from pdfwatch.cli.main import main

if __name__ == "__main__":
    main()
