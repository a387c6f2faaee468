"""Client-side checks run on a file before it is uploaded.

Validation is advisory: the scanning service has the final say. The rules
look only at declared attributes (size, name, content type) and never sniff
the content.
"""

from __future__ import annotations

from malscan_sdk.models import CandidateFile, ValidationResult

MAX_BYTES = 10 * 1024 * 1024  # 10 MiB
ALLOWED_EXTENSIONS = ("pdf", "doc", "docx", "txt", "zip")
ALLOWED_MIME_TYPES = (
    "application/pdf",
    "text/plain",
    "application/zip",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)


def validate_file(file: CandidateFile | None) -> ValidationResult:
    """Check *file* against the size, extension and MIME allow-lists.

    All violated rules are reported, except that a missing file short-circuits
    with ``"No file provided"``.

    Args:
        file: The candidate file, or ``None`` when nothing was selected.

    Returns:
        A :class:`ValidationResult` listing every violation in rule order.
    """
    if file is None:
        return ValidationResult(is_valid=False, errors=("No file provided",))

    errors: list[str] = []

    if file.size > MAX_BYTES:
        errors.append(f"File size exceeds {MAX_BYTES // (1024 * 1024)}MB limit")

    name = (file.name or "").lower()
    extension = name.rsplit(".", 1)[1] if "." in name else ""
    if extension not in ALLOWED_EXTENSIONS:
        errors.append(f"File extension not allowed. Allowed: {', '.join(ALLOWED_EXTENSIONS)}")

    if file.content_type not in ALLOWED_MIME_TYPES:
        errors.append(f"File type not allowed. Detected: {file.content_type}")

    return ValidationResult(is_valid=not errors, errors=tuple(errors))


def is_allowed(file: CandidateFile | None) -> bool:
    return validate_file(file).is_valid
