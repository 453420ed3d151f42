"""Processing pipeline: one upload/poll/download/archive run per ready file."""

from pdfwatch.pipeline.dispatcher import PipelineDispatcher
from pdfwatch.pipeline.outputs import archive_original, compute_output_path, output_filename
from pdfwatch.pipeline.processor import FileProcessor, process_file_event

__all__ = [
    "FileProcessor",
    "PipelineDispatcher",
    "archive_original",
    "compute_output_path",
    "output_filename",
    "process_file_event",
]
