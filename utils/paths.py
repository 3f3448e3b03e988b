import os
from urllib.parse import urlparse

from services.errors import PathOutsideRootError, StylesheetNotFoundError

INLINE_SOURCE = 'inline'


def normalize_file_path(path):
    """Reduce an href or URL to a root-relative path ('inline' passes through)"""
    if path == INLINE_SOURCE:
        return path
    parsed_path = urlparse(path).path or path
    return parsed_path.lstrip('/')


def is_within(path, root):
    """True if path, symlinks resolved, is root or lies below it"""
    real_root = os.path.realpath(root)
    real_path = os.path.realpath(path)
    return os.path.commonpath([real_root, real_path]) == real_root


def resolve_within_root(document_root, relative_path):
    """
    Resolve a root-relative path to an absolute file path inside document_root.

    Symlinks are resolved first, so a link pointing outside the root is
    rejected as well.

    Raises:
        PathOutsideRootError: the resolved path escapes the root.
        StylesheetNotFoundError: the file does not exist.
    """
    if relative_path == INLINE_SOURCE:
        raise StylesheetNotFoundError(relative_path, 'Inline styles have no backing file')

    real_root = os.path.realpath(document_root)
    real_path = os.path.realpath(os.path.join(real_root, relative_path))

    if os.path.commonpath([real_root, real_path]) != real_root:
        raise PathOutsideRootError(relative_path, f'Path outside document root: {relative_path}')
    if not os.path.isfile(real_path):
        raise StylesheetNotFoundError(relative_path, f'File not found or unavailable: {relative_path}')
    return real_path
