"""Catalog of the processing tools offered by the remote service."""

from __future__ import annotations

from dataclasses import dataclass

from pdfwatch.kernel.exceptions import ValidationError


@dataclass(frozen=True, slots=True)
class ToolDefinition:
    """Display and routing information for one tool."""

    id: str
    name: str
    description: str
    api_endpoint: str
    output_extension: str = "pdf"
    has_options: bool = False


_TOOLS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        id="compress",
        name="Compress PDF",
        description="Reduce PDF file size while maintaining quality",
        api_endpoint="compress",
        has_options=True,
    ),
    ToolDefinition(
        id="outline",
        name="Outline Fonts",
        description="Convert text to vector outlines for printing",
        api_endpoint="outline",
    ),
    ToolDefinition(
        id="pdf-to-word",
        name="PDF to Word",
        description="Convert PDF to editable Word document",
        api_endpoint="pdf-to-word",
        output_extension="docx",
    ),
    ToolDefinition(
        id="pdf-to-excel",
        name="PDF to Excel",
        description="Convert PDF tables to Excel spreadsheet",
        api_endpoint="pdf-to-excel",
        output_extension="xlsx",
    ),
    ToolDefinition(
        id="pdf-to-jpg",
        name="PDF to JPG",
        description="Convert PDF pages to JPG images (zip archive)",
        api_endpoint="pdf-to-jpg",
        output_extension="zip",
    ),
    ToolDefinition(
        id="rotate",
        name="Rotate PDF",
        description="Rotate PDF pages 90, 180 or 270 degrees",
        api_endpoint="rotate",
        has_options=True,
    ),
    ToolDefinition(
        id="unlock",
        name="Unlock PDF",
        description="Remove password protection from PDF",
        api_endpoint="unlock",
    ),
    ToolDefinition(
        id="ocr",
        name="OCR PDF",
        description="Make scanned PDFs searchable with OCR",
        api_endpoint="ocr",
        has_options=True,
    ),
    ToolDefinition(
        id="bleed",
        name="Add Bleed",
        description="Add bleed margins for professional printing",
        api_endpoint="bleed",
        has_options=True,
    ),
)


def get_available_tools() -> list[ToolDefinition]:
    """Return every known tool in display order."""
    return list(_TOOLS)


def get_tool(tool_id: str) -> ToolDefinition:
    """Look up a tool by id.

    Raises
    ------
    ValidationError
        If no tool has that id
    """
    for tool in _TOOLS:
        if tool.id == tool_id:
            return tool
    raise ValidationError("tool_id", f"unknown tool, expected one of {[t.id for t in _TOOLS]}", tool_id)


def output_extension(tool_id: str) -> str:
    """File extension of the result a tool produces; unknown tools yield 'pdf'."""
    for tool in _TOOLS:
        if tool.id == tool_id:
            return tool.output_extension
    return "pdf"
