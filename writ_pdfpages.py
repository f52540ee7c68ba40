"""
Page counts for uploaded PDF attachments.

This runs before pagination: detected counts are written into the form
(annexure.page_count, court_fee_attachment_pages,
proof_of_service_page_counts) so that the next call to
paginate() sees them. A file that cannot be read leaves the declared count
untouched.
"""

import io
import logging
from pathlib import Path
from typing import Optional, Union

import pikepdf

logger = logging.getLogger(__name__)


def count_pdf_pages(source: Union[str, Path, bytes]) -> Optional[int]:
    """Number of pages in a PDF file or PDF bytes, or None if it cannot be opened."""
    try:
        if isinstance(source, (bytes, bytearray)):
            with pikepdf.open(io.BytesIO(source)) as pdf:
                return len(pdf.pages)
        with pikepdf.open(source) as pdf:
            return len(pdf.pages)
    except (pikepdf.PdfError, OSError, ValueError) as e:
        logger.warning("Could not count pages of %s: %s", _describe(source), e)
        return None


def _describe(source) -> str:
    if isinstance(source, (bytes, bytearray)):
        return f"<{len(source)} bytes>"
    return str(source)


def _resolve(reference: str, base_dir: Optional[Path]) -> Path:
    path = Path(reference)
    if base_dir is not None and not path.is_absolute():
        path = Path(base_dir) / path
    return path


def is_pdf_reference(reference: Optional[str]) -> bool:
    return bool(reference) and reference.lower().endswith(".pdf")


def detect_attachment_pages(form, base_dir: Optional[Path] = None) -> int:
    """
    Update page counts on the form from its attached PDFs.
    Returns how many counts were written.
    """
    updated = 0
    for idx, ann in enumerate(form.annexures):
        if not is_pdf_reference(ann.file):
            continue
        pages = count_pdf_pages(_resolve(ann.file, base_dir))
        if pages is not None:
            logger.info("Annexure %d (%s): %d pages detected", idx + 1, ann.file, pages)
            ann.page_count = str(pages)
            updated += 1

    if is_pdf_reference(form.court_fee_attachment):
        pages = count_pdf_pages(_resolve(form.court_fee_attachment, base_dir))
        if pages is not None:
            form.court_fee_attachment_pages = str(pages)
            updated += 1

    counts = list(form.proof_of_service_page_counts)
    counts += [None] * (len(form.proof_of_service_uploads) - len(counts))
    for idx, upload in enumerate(form.proof_of_service_uploads):
        if not is_pdf_reference(upload):
            continue
        pages = count_pdf_pages(_resolve(upload, base_dir))
        if pages is not None:
            logger.info("Proof of service %d (%s): %d pages detected", idx + 1, upload, pages)
            counts[idx] = str(pages)
            form.proof_of_service_page_counts = counts
            updated += 1
    return updated
