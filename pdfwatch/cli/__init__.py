"""pdfwatch command line interface."""
