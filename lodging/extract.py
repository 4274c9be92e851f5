"""
Plain text extraction from saved confirmation documents.

Supports plain text, HTML, saved emails (.eml), PDFs (pypdf, with an OCR
fallback for scanned pages) and images (Tesseract via pytesseract).
"""

import email
import email.policy
import logging
import re
from html import unescape
from html.parser import HTMLParser
from io import BytesIO
from pathlib import Path

import pytesseract
from PIL import Image, UnidentifiedImageError
from pypdf import PdfReader
from pypdf.errors import PdfReadError

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = frozenset({'.txt'})
HTML_SUFFIXES = frozenset({'.html', '.htm'})
EMAIL_SUFFIXES = frozenset({'.eml'})
PDF_SUFFIXES = frozenset({'.pdf'})
IMAGE_SUFFIXES = frozenset({'.png', '.jpg', '.jpeg', '.webp', '.bmp', '.tif', '.tiff'})

SUPPORTED_SUFFIXES = TEXT_SUFFIXES | HTML_SUFFIXES | EMAIL_SUFFIXES | PDF_SUFFIXES | IMAGE_SUFFIXES

DEFAULT_OCR_LANG = 'eng'


class ExtractionError(Exception):
    """A document could not be turned into text."""


# ============================================================================
# HTML TEXT EXTRACTION (using native Python html.parser)
# ============================================================================

class _TextExtractor(HTMLParser):
    """Extract visible text from HTML, one line per block element."""

    SKIP_TAGS = frozenset({'script', 'style', 'head', 'meta', 'link', 'noscript', 'svg', 'path'})
    BLOCK_TAGS = frozenset({'br', 'p', 'div', 'tr', 'li', 'h1', 'h2', 'h3', 'h4', 'table', 'td'})

    def __init__(self):
        super().__init__()
        self.text_parts = []
        self.skip_depth = 0

    def handle_starttag(self, tag, attrs):
        tag = tag.lower()
        if tag in self.SKIP_TAGS:
            self.skip_depth += 1
        elif tag in self.BLOCK_TAGS:
            self.text_parts.append('\n')

    def handle_endtag(self, tag):
        tag = tag.lower()
        if tag in self.SKIP_TAGS and self.skip_depth > 0:
            self.skip_depth -= 1
        elif tag in self.BLOCK_TAGS:
            self.text_parts.append('\n')

    def handle_data(self, data):
        if self.skip_depth == 0:
            text = data.strip()
            if text:
                self.text_parts.append(text)

    def get_text(self):
        return ' '.join(self.text_parts)


def _tidy_lines(text):
    lines = [re.sub(r'[ \t\xa0\u202f]+', ' ', line).strip() for line in text.splitlines()]
    return '\n'.join(line for line in lines if line)


def html_to_text(html_text):
    """Return the visible text of an HTML document, keeping block line breaks."""
    if not html_text:
        return ""

    parser = _TextExtractor()
    parser.feed(html_text)
    parser.close()
    result = _tidy_lines(unescape(parser.get_text()))

    # Some malformed HTML yields nothing through HTMLParser
    if not result and len(html_text) > 100:
        result = _tidy_lines(unescape(re.sub(r'<[^>]+>', '\n', html_text)))
    return result


# ============================================================================
# EMAIL (.eml)
# ============================================================================

def _decode_payload(part):
    payload = part.get_payload(decode=True)
    if not payload:
        return ""
    charset = part.get_content_charset() or 'utf-8'
    try:
        return payload.decode(charset, errors='replace')
    except LookupError:
        return payload.decode('utf-8', errors='replace')


def get_email_body(msg):
    """Extract the largest plain text and HTML bodies of a message.

    Returns:
        Tuple of (plain_text_body, html_body)
    """
    body = ""
    html_body = ""

    for part in msg.walk():
        content_type = part.get_content_type()
        if content_type.startswith("multipart/"):
            continue
        if "attachment" in str(part.get("Content-Disposition", "")):
            continue

        text = _decode_payload(part)
        if content_type == "text/plain" and len(text) > len(body):
            body = text
        elif content_type == "text/html" and len(text) > len(html_body):
            html_body = text

    return body, html_body


def email_to_text(raw_bytes):
    """Return the confirmation text of a saved email, subject first."""
    msg = email.message_from_bytes(raw_bytes, policy=email.policy.compat32)
    body, html_body = get_email_body(msg)
    text = body if body.strip() else html_to_text(html_body)
    subject = msg.get("Subject")
    if subject:
        text = f"{subject}\n{text}"
    return text


# ============================================================================
# PDF AND IMAGES
# ============================================================================

def _clean_pdf_text(text):
    return (text or "").replace("\u202f", " ").replace("\xa0", " ")


def ocr_image(image, lang=None):
    """Run Tesseract over a Pillow image.

    Image.open only reads the header, so a truncated file fails here.
    """
    try:
        image.load()
        if image.mode not in {"RGB", "L"}:
            image = image.convert("RGB")
    except (OSError, ValueError, SyntaxError) as e:
        raise ExtractionError(f"Unreadable image: {e}") from e
    try:
        return pytesseract.image_to_string(image, lang=lang or DEFAULT_OCR_LANG) or ""
    except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError, OSError, ValueError) as e:
        raise ExtractionError(f"OCR failed: {e}") from e


def _ocr_pdf_page(page, lang=None):
    """OCR the largest embedded image of a page without a text layer."""
    best_image = None
    best_area = 0
    for image_file in page.images:
        image = image_file.image
        if image is None:
            continue
        area = image.width * image.height
        if area > best_area:
            best_area = area
            best_image = image

    if best_image is None:
        return ""
    return ocr_image(best_image, lang=lang)


def pdf_to_text(pdf_bytes, lang=None):
    """Join the text of every PDF page, OCR'ing pages that have no text layer."""
    try:
        reader = PdfReader(BytesIO(pdf_bytes))
        pages = []
        for page in reader.pages:
            text = _clean_pdf_text(page.extract_text())
            if not text.strip():
                logger.debug("  -> PDF page has no text layer, trying OCR")
                text = _clean_pdf_text(_ocr_pdf_page(page, lang=lang))
            pages.append(text)
    except (PdfReadError, OSError, ValueError) as e:
        raise ExtractionError(f"PDF extraction failed: {e}") from e
    return "\n".join(pages)


def image_to_text(image_bytes, lang=None):
    try:
        image = Image.open(BytesIO(image_bytes))
    except (UnidentifiedImageError, OSError) as e:
        raise ExtractionError(f"Unreadable image: {e}") from e
    return ocr_image(image, lang=lang)


# ============================================================================
# DISPATCH
# ============================================================================

def is_supported(path):
    return Path(path).suffix.lower() in SUPPORTED_SUFFIXES


def extract_text(path, lang=None):
    """Extract plain text from a confirmation document.

    Args:
        path: Document path (.txt, .html, .eml, .pdf or an image)
        lang: Tesseract language for OCR (defaults to English)

    Returns:
        The document's text

    Raises:
        ExtractionError: missing file, unsupported type, or unreadable content
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix not in SUPPORTED_SUFFIXES:
        raise ExtractionError(f"Unsupported file type: {path.name}")
    if not path.is_file():
        raise ExtractionError(f"File not found: {path}")

    logger.debug(f"extract_text: {path.name}")
    raw = path.read_bytes()

    if suffix in TEXT_SUFFIXES:
        return raw.decode('utf-8', errors='replace')
    if suffix in HTML_SUFFIXES:
        return html_to_text(raw.decode('utf-8', errors='replace'))
    if suffix in EMAIL_SUFFIXES:
        return email_to_text(raw)
    if suffix in PDF_SUFFIXES:
        return pdf_to_text(raw, lang=lang)
    return image_to_text(raw, lang=lang)
