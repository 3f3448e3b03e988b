import logging
from urllib.parse import urljoin, urlparse

import requests

from services.errors import StylesheetError
from services.stylesheet_source import DEFAULT_MAX_FILE_SIZE, read_stylesheet
from utils.paths import normalize_file_path

logger = logging.getLogger(__name__)


class StylesheetLoader:
    """
    Gets stylesheet text for the sampler.

    Same-origin sheets are read straight from the document root. Anything
    that cannot be read that way is fetched over the network; when that
    fails too the sheet is skipped with a warning.
    """

    def __init__(self, document_root=None, page_url=None, timeout=10, session=None,
                 max_file_size=DEFAULT_MAX_FILE_SIZE):
        self.document_root = document_root
        self.page_url = page_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.max_file_size = max_file_size

    def resolve(self, href, base_url=None):
        """Absolute (or root-relative) URL of href seen from base_url"""
        return urljoin(base_url or self.page_url or '/', href)

    def is_same_origin(self, url):
        target = urlparse(url)
        if not target.netloc:
            return True
        if not self.page_url:
            return False
        page = urlparse(self.page_url)
        return (target.scheme, target.netloc) == (page.scheme, page.netloc)

    def read_local(self, url):
        if not self.document_root or not self.is_same_origin(url):
            raise StylesheetError(url, f'Not readable from the document root: {url}')
        css, _ = read_stylesheet(self.document_root, normalize_file_path(url), self.max_file_size)
        return css

    def fetch(self, url):
        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.text

    def load(self, url, warnings):
        """
        Return the stylesheet text, or None after appending a warning.
        """
        try:
            return self.read_local(url)
        except (StylesheetError, OSError) as e:
            logger.debug("Direct read failed for %s: %s", url, e)

        if urlparse(url).scheme not in ('http', 'https'):
            warnings.append(f'Stylesheet skipped, not readable: {url}')
            logger.warning("Stylesheet skipped, not readable: %s", url)
            return None

        try:
            return self.fetch(url)
        except requests.RequestException as e:
            warnings.append(f'Stylesheet skipped, fetch failed: {url}')
            logger.warning("Fetching %s failed: %s", url, e)
            return None
