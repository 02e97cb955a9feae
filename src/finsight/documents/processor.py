"""PDF text extraction."""
import io
from typing import List, Optional

import pdfplumber
import pypdf

from finsight.utils.logger import get_logger
from finsight.utils.exceptions import PDFError

logger = get_logger()


class PDFProcessor:
    """Extracts page text from PDF files."""

    def extract_pages(self, data: bytes, name: str = "document.pdf") -> List[str]:
        """
        Extract text from each page of a PDF.

        Args:
            data: Raw PDF bytes
            name: File name used in log messages

        Returns:
            One string per page that produced text

        Raises:
            PDFError: If no text can be extracted
        """
        pages = self._extract_with_pdfplumber(data, name)

        if not pages:
            logger.info(f"pdfplumber extracted no text, trying pypdf for {name}")
            pages = self._extract_with_pypdf(data, name)

        if not self.validate_extraction(pages):
            raise PDFError(f"No text could be extracted from {name}. File may be scanned or corrupted.")

        logger.info(f"Extracted {sum(len(p) for p in pages)} characters from {len(pages)} pages of {name}")
        return pages

    def validate_extraction(self, pages: Optional[List[str]]) -> bool:
        return bool(pages) and any(page.strip() for page in pages)

    def _extract_with_pdfplumber(self, data: bytes, name: str) -> Optional[List[str]]:
        """
        Extract page text using pdfplumber.

        Returns:
            Page texts or None if extraction failed
        """
        try:
            with pdfplumber.open(io.BytesIO(data)) as pdf:
                pages = []
                for i, page in enumerate(pdf.pages, 1):
                    page_text = page.extract_text()
                    if page_text and page_text.strip():
                        pages.append(page_text.strip())
                        logger.debug(f"pdfplumber: Page {i} extracted {len(page_text)} chars")
                    else:
                        logger.debug(f"pdfplumber: Page {i} extracted no text")
                return pages or None

        except Exception as e:
            logger.warning(f"pdfplumber extraction failed for {name}: {e}")
            return None

    def _extract_with_pypdf(self, data: bytes, name: str) -> Optional[List[str]]:
        """
        Extract page text using pypdf (fallback).

        Returns:
            Page texts or None if extraction failed
        """
        try:
            reader = pypdf.PdfReader(io.BytesIO(data))
            pages = []
            for i, page in enumerate(reader.pages, 1):
                page_text = page.extract_text()
                if page_text and page_text.strip():
                    pages.append(page_text.strip())
                    logger.debug(f"pypdf: Page {i} extracted {len(page_text)} chars")
                else:
                    logger.debug(f"pypdf: Page {i} extracted no text")
            return pages or None

        except Exception as e:
            logger.error(f"pypdf extraction failed for {name}: {e}")
            return None
