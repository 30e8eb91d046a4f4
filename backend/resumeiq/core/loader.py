# Turns uploaded PDF bytes into plain text the parsing stages can hand to the model
import io
import re
from dataclasses import dataclass
from typing import Protocol

from pypdf import PdfReader
from pypdf.errors import PyPdfError

PDF_HEADER = b"%PDF-"
PAGE_BREAK = "--- Page Break ---"


class DocumentExtractionError(Exception):
    """Raised when a buffer is not a readable PDF document."""


@dataclass(frozen=True)
class ExtractedDocument:
    text: str
    page_count: int


class DocumentExtractor(Protocol):
    def extract_text(self, data: bytes) -> ExtractedDocument: ...


class PdfTextExtractor:
    def __init__(self, strict: bool = False):
        self.strict = strict

    @staticmethod
    def is_valid_pdf(data: bytes) -> bool:
        return bool(data) and data[:1024].lstrip().startswith(PDF_HEADER)

    def extract_text(self, data: bytes) -> ExtractedDocument:
        if not self.is_valid_pdf(data):
            raise DocumentExtractionError("Invalid PDF file")

        try:
            reader = PdfReader(io.BytesIO(data), strict=self.strict)
            pages = [page.extract_text() or "" for page in reader.pages]
        except (PyPdfError, ValueError, KeyError, OSError, TypeError, AttributeError) as e:
            raise DocumentExtractionError(f"Failed to read PDF: {e}") from e

        text = f"\n\n{PAGE_BREAK}\n\n".join(page.strip() for page in pages)
        return ExtractedDocument(text=text, page_count=len(pages))


def clean_extracted_text(text: str) -> str:
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"\n{3,}", "\n\n", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    text = re.sub(rf"\n*{re.escape(PAGE_BREAK)}\n*", "\n\n", text)
    return text.strip()
