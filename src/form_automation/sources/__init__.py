"""
Record Sources

Adapters that turn uploaded PDFs or client payloads into form records.
"""

from .pdf import extract_text_from_pdf, parse_block, parse_records
from .payload import records_from_payload


__all__ = [
    "extract_text_from_pdf",
    "parse_block",
    "parse_records",
    "records_from_payload",
]
