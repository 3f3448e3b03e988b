import logging

from bs4 import BeautifulSoup

from lib.css_tree import OpaqueRule, iter_selectors, parse_stylesheet
from sampler.models import SampleResult, SelectorRecord, SelectorStatus
from services.errors import CssParseError
from services.selector_rules import classify
from utils.paths import INLINE_SOURCE, normalize_file_path

logger = logging.getLogger(__name__)

# back-to-back repeats beyond this are logged as a warning
DUPLICATE_RUN_WARNING = 5


def _join_media(outer, inner):
    if outer and inner:
        return f'{outer} and {inner}'
    return outer or inner


def find_duplicate_selectors(found):
    """
    Scan (source file, selector, media) entries in stylesheet order.

    A selector is a duplicate when it was already declared in the same
    media context, in any file. Consecutive duplicates form a run.

    Returns:
        tuple: (duplicate selectors in encounter order,
                runs longer than DUPLICATE_RUN_WARNING)
    """
    seen = set()
    duplicates = []
    long_runs = []
    run = []
    for _, selector, media in found:
        if (selector, media) in seen:
            duplicates.append(selector)
            run.append(selector)
            continue
        seen.add((selector, media))
        if len(run) > DUPLICATE_RUN_WARNING:
            long_runs.append(run)
        run = []
    if len(run) > DUPLICATE_RUN_WARNING:
        long_runs.append(run)
    return duplicates, long_runs


class UsageSampler:
    """
    Learns which selectors of a page's stylesheets match its document.

    A selector that matched once is never tested again: used is one-way.
    """

    def __init__(self, document, loader):
        self.loader = loader
        self._records = {}
        self._used = set()
        self._previous = None
        self._duplicates = None
        self.set_document(document)

    def set_document(self, document):
        """Swap in a new DOM state; earlier matches stay recorded"""
        if isinstance(document, str):
            document = BeautifulSoup(document, 'html.parser')
        self.document = document

    def known_stylesheets(self):
        """Return (stylesheet URLs from <link>, texts of <style> blocks)"""
        urls = []
        for link in self.document.find_all('link', href=True):
            rel = [value.lower() for value in link.get('rel', [])]
            if 'stylesheet' in rel:
                url = self.loader.resolve(link['href'])
                if url not in urls:
                    urls.append(url)
        inline = [style.get_text() for style in self.document.find_all('style')]
        return urls, inline

    def collect(self, warnings):
        """Every (source file, selector, media) visible to the page"""
        found = []
        visited = set()
        urls, inline = self.known_stylesheets()

        for url in urls:
            self._collect_url(url, None, found, warnings, visited)
        for css in inline:
            self._collect_text(css, INLINE_SOURCE, None, None, found, warnings, visited)

        return found

    def _collect_url(self, url, media, found, warnings, visited):
        if url in visited:
            return
        visited.add(url)

        css = self.loader.load(url, warnings)
        if css is None:
            return
        self._collect_text(css, normalize_file_path(url), url, media, found, warnings, visited)

    def _collect_text(self, css, source_file, base_url, media, found, warnings, visited):
        try:
            tree = parse_stylesheet(css)
        except CssParseError as e:
            warnings.append(f'Could not parse {source_file}: {e}')
            logger.warning("Could not parse %s: %s", source_file, e)
            return

        for child in tree.children:
            if isinstance(child, OpaqueRule) and child.name == 'import' and child.import_url:
                imported = self.loader.resolve(child.import_url, base_url)
                self._collect_url(imported, _join_media(media, child.import_media), found, warnings, visited)

        for selector, selector_media in iter_selectors(tree):
            found.append((source_file, selector, _join_media(media, selector_media)))

    def scan(self):
        """
        Re-read the stylesheets and test every pending eligible selector.

        Returns:
            SampleResult
        """
        result = SampleResult()
        found = self.collect(result.warnings)
        self._check_duplicates(found, result)

        current = {}
        for source_file, selector, media in found:
            key = (source_file, selector, media)
            if key not in current:
                current[key] = self._records.get(key) or SelectorRecord(
                    selector=selector,
                    source_file=source_file,
                    media=media,
                    eligible=classify(selector),
                )

        # added/removed are computed before usage is tested
        selectors_now = {key[1] for key in current}
        if self._previous is not None:
            result.added = sorted(selectors_now - self._previous)
            result.removed = sorted(self._previous - selectors_now)
        self._previous = selectors_now
        self._records = current

        for record in current.values():
            if record.status is SelectorStatus.USED:
                continue
            if record.selector in self._used or self._matches(record.selector):
                self._used.add(record.selector)
                record.mark_used()
            else:
                record.mark_unused()

        result.records = list(current.values())
        logger.debug("Scan finished: %d selectors, %d unused", len(current), result.unused_count)
        return result

    def _check_duplicates(self, found, result):
        result.duplicates, long_runs = find_duplicate_selectors(found)
        for run in long_runs:
            result.warnings.append(f'Duplicated sequence of selectors: {", ".join(run)}')

        # log once per change, not on every tick
        if result.duplicates == self._duplicates:
            return
        self._duplicates = result.duplicates
        for run in long_runs:
            logger.warning("Duplicated sequence of %d selectors: %s", len(run), ', '.join(run))
        if result.duplicates:
            logger.info("Duplicated selectors: %s", ', '.join(result.duplicates))

    def _matches(self, selector):
        try:
            return self.document.select_one(selector) is not None
        except Exception as e:
            # malformed or unsupported by soupsieve: keep it
            logger.debug("Selector %r not testable, kept as used: %s", selector, e)
            return True
