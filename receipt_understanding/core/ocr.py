"""
OCR front end: turn a receipt image or PDF into raw text.

Errors here are reported as OCRError / ReceiptFileError and never reach the
receipt parser.
"""

import io
from pathlib import Path

from .utils import IMAGE_EXTS, PDF_EXTS, TEXT_EXTS, RECEIPT_EXTS, MAX_UPLOAD_BYTES


class ReceiptFileError(ValueError):
    """Raised for files that cannot be accepted as receipts."""


class OCRError(RuntimeError):
    """Raised when the text recognition engine fails."""


def _lazy_import_ocr_deps():
    """Lazy import heavy OCR dependencies."""
    global pytesseract, PIL_Image, fitz
    import importlib
    pytesseract = importlib.import_module("pytesseract")
    PIL_Image = importlib.import_module("PIL.Image")
    fitz = importlib.import_module("fitz")  # pymupdf


# Initialize on first use
pytesseract = None
PIL_Image = None
fitz = None


def validate_receipt_file(path: Path):
    """Check extension and size before spending time on OCR."""
    if not path.is_file():
        raise ReceiptFileError(f"Receipt not found: {path}")
    if path.suffix.lower() not in RECEIPT_EXTS:
        allowed = ", ".join(sorted(RECEIPT_EXTS))
        raise ReceiptFileError(f"Unsupported file type: {path.name} (allowed: {allowed})")
    size = path.stat().st_size
    if size > MAX_UPLOAD_BYTES:
        raise ReceiptFileError(
            f"File too large: {path.name} is {size} bytes, "
            f"maximum is {MAX_UPLOAD_BYTES // (1024 * 1024)}MB")


def _image_to_text(img, lang: str) -> str:
    # Grayscale tends to help Tesseract on thermal-paper scans
    if img.mode != "L":
        img = img.convert("L")
    try:
        return pytesseract.image_to_string(img, lang=lang)
    except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as e:
        raise OCRError(f"Tesseract failed: {e}") from e


def ocr_image_to_text(img_path: Path, lang: str = "eng") -> str:
    """OCR an image file to text."""
    if pytesseract is None:
        _lazy_import_ocr_deps()

    try:
        img = PIL_Image.open(img_path)
        # Pillow decodes lazily; force it so truncated files fail here
        img.load()
    except OSError as e:
        raise OCRError(f"Could not read image {img_path.name}: {e}") from e
    return _image_to_text(img, lang)


def pdf_to_text(pdf_path: Path, lang: str = "eng") -> str:
    """
    Extract text from a PDF using its text layer.
    Pages without a text layer are rasterized and run through Tesseract.
    """
    if fitz is None:
        _lazy_import_ocr_deps()

    try:
        doc = fitz.open(pdf_path.as_posix())
    except RuntimeError as e:
        raise OCRError(f"Could not open PDF {pdf_path.name}: {e}") from e

    chunks = []
    try:
        for page in doc:
            text = page.get_text()
            if not text.strip():
                try:
                    pix = page.get_pixmap(matrix=fitz.Matrix(2, 2), alpha=False)
                    img = PIL_Image.open(io.BytesIO(pix.tobytes("png")))
                    img.load()
                except (RuntimeError, OSError) as e:
                    raise OCRError(f"Could not rasterize page {page.number + 1} of {pdf_path.name}: {e}") from e
                text = _image_to_text(img, lang)
            chunks.append(text)
    finally:
        doc.close()
    return "\n".join(chunks)


def extract_text(path: Path, lang: str = "eng") -> str:
    """
    Recognize the text of one receipt file.

    Args:
        path: Image, PDF or plain-text receipt
        lang: Tesseract language hint (e.g. "eng")

    Returns:
        Raw text, possibly empty
    """
    validate_receipt_file(path)
    ext = path.suffix.lower()

    if ext in TEXT_EXTS:
        return path.read_text(encoding="utf-8", errors="replace")
    if ext in IMAGE_EXTS:
        return ocr_image_to_text(path, lang)
    if ext in PDF_EXTS:
        return pdf_to_text(path, lang)
    raise ReceiptFileError(f"Unsupported file type: {path}")
