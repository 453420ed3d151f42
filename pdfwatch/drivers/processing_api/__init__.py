"""HTTP driver for the remote PDF processing service."""

from pdfwatch.drivers.processing_api.client import ProcessingApiClient

__all__ = ["ProcessingApiClient"]
