import os

from services.errors import FileTooLargeError, StylesheetError
from utils.paths import resolve_within_root

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024


def read_stylesheet(document_root, relative_path, max_size=DEFAULT_MAX_FILE_SIZE):
    """
    Read an original stylesheet from the document root.

    Returns:
        tuple: (css text, size in bytes)

    Raises:
        StylesheetError: outside the root, missing, too large or unreadable.
    """
    file_path = resolve_within_root(document_root, relative_path)

    size = os.path.getsize(file_path)
    if size > max_size:
        raise FileTooLargeError(relative_path, f'File too large: {relative_path}')

    try:
        with open(file_path, 'rb') as f:
            raw = f.read()
    except OSError as e:
        raise StylesheetError(relative_path, f'Could not read file: {relative_path}') from e

    return raw.decode('utf-8-sig', errors='replace'), len(raw)
