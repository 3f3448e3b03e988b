import os
import time
import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

from lib.css_tree import AtRuleContainer, DeclarationBlock, parse_stylesheet
from lib.minify import minify_css
from services.backup_service import create_backup
from services.errors import (
    CssParseError, OutputWriteError, RewriteTimeoutError, StylesheetError
)
from services.selector_rules import classify, is_critical_selector
from services.stylesheet_source import DEFAULT_MAX_FILE_SIZE, read_stylesheet
from utils.files import atomic_write
from utils.ledger_store import UNUSED
from utils.paths import INLINE_SOURCE, is_within

COMBINED_FILE_NAME = 'remove-unused-css.min.css'

logger = logging.getLogger(__name__)


@dataclass
class ProcessingStatistics:
    processed_files: int = 0
    generated_files: int = 0
    combined_file: bool = False
    original_size: int = 0
    final_size: int = 0
    combined_size: int = 0
    selectors_removed: int = 0

    @property
    def bytes_saved(self):
        return self.original_size - self.final_size

    def to_dict(self):
        data = asdict(self)
        data['bytes_saved'] = self.bytes_saved
        return data


@dataclass
class FileResult:
    relative_path: str
    css: str
    original_size: int
    selectors_removed: int

    @property
    def final_size(self):
        return len(self.css.encode('utf-8'))


@dataclass
class RewriteResult:
    processed_files: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    statistics: ProcessingStatistics = field(default_factory=ProcessingStatistics)


def is_block_dead(block, statuses):
    """
    A block is dead iff every selector is eligible, explicitly "unused" in
    the ledger and not a critical selector.
    """
    if not block.selectors:
        return False
    for selector in block.selectors:
        if is_critical_selector(selector):
            return False
        if not classify(selector):
            return False
        if statuses.get(selector) != UNUSED:
            return False
    return True


def prune_tree(container, statuses):
    """
    Remove dead blocks below container and drop containers they emptied.

    Children are decided against a snapshot and replaced in one step
    afterwards, never mutated mid-iteration.

    Returns:
        int: Selector-list lengths of every removed block, summed.
    """
    removed = 0
    kept = []
    for child in list(container.children):
        if isinstance(child, DeclarationBlock):
            if is_block_dead(child, statuses):
                removed += len(child.selectors)
                continue
        elif isinstance(child, AtRuleContainer):
            had_children = bool(child.children)
            removed += prune_tree(child, statuses)
            if had_children and not child.children:
                continue
        kept.append(child)
    container.children = kept
    return removed


class RewriteEngine:
    """Produces cleaned stylesheets and the combined bundle from the ledger."""

    def __init__(self, document_root, output_dir, combined_file_name=COMBINED_FILE_NAME,
                 max_file_size=DEFAULT_MAX_FILE_SIZE, workers=4, timeout=100,
                 backup_dir: Optional[str] = None):
        if is_within(output_dir, document_root):
            raise ValueError(f'Output directory {output_dir} lies inside document root {document_root}')
        self.document_root = document_root
        self.output_dir = output_dir
        self.combined_file_name = combined_file_name
        self.max_file_size = max_file_size
        self.workers = max(1, workers)
        self.timeout = timeout
        self.backup_dir = backup_dir

    @property
    def combined_path(self):
        return os.path.join(self.output_dir, self.combined_file_name)

    def clean_css(self, css, statuses):
        """Return (cleaned css, selectors removed) for one stylesheet's text"""
        tree = parse_stylesheet(css)
        removed = prune_tree(tree, statuses)
        return tree.render(), removed

    def process_file(self, relative_path, statuses: Dict[str, str]):
        """Clean one original file and write it under the output directory."""
        css, original_size = read_stylesheet(self.document_root, relative_path, self.max_file_size)
        cleaned, removed = self.clean_css(css, statuses)

        atomic_write(self.output_path(relative_path), cleaned)

        return FileResult(relative_path, cleaned, original_size, removed)

    def output_path(self, relative_path):
        real_root = os.path.realpath(self.document_root)
        real_path = os.path.realpath(os.path.join(real_root, relative_path))
        return os.path.join(self.output_dir, os.path.relpath(real_path, real_root))

    def run(self, ledger):
        """
        Rewrite every file named in the ledger.

        Per-file failures are collected in ``errors``; a blown time budget
        raises RewriteTimeoutError and a failed bundle write raises
        OutputWriteError.
        """
        result = RewriteResult()
        paths = [path for path in ledger if path != INLINE_SOURCE]

        if self.backup_dir:
            _, backup_errors = create_backup(self.document_root, self.backup_dir, paths)
            result.errors.extend(backup_errors)

        file_results = self._process_all(paths, ledger, result.errors)
        stats = result.statistics

        for file_result in file_results:
            result.processed_files.append(file_result.relative_path)
            stats.generated_files += 1
            stats.original_size += file_result.original_size
            stats.final_size += file_result.final_size
            stats.selectors_removed += file_result.selectors_removed

        stats.processed_files = len(result.processed_files)

        if file_results:
            combined = self.build_combined(file_results)
            self._write_combined(combined)
            stats.combined_file = True
            stats.combined_size = len(combined.encode('utf-8'))
            stats.generated_files += 1

        logger.info(
            "Rewrite finished: %d files, %d selectors removed, %d bytes saved",
            stats.processed_files, stats.selectors_removed, stats.bytes_saved
        )
        return result

    @staticmethod
    def build_combined(file_results):
        combined = ''.join(
            f'/* {file_result.relative_path} */\n{file_result.css}\n\n'
            for file_result in file_results
        )
        return minify_css(combined)

    def _process_all(self, paths, ledger, errors):
        executor = ThreadPoolExecutor(max_workers=self.workers)
        deadline = time.monotonic() + self.timeout
        file_results = []
        timed_out = False
        try:
            futures = [(path, executor.submit(self.process_file, path, ledger[path])) for path in paths]
            for path, future in futures:
                remaining = max(deadline - time.monotonic(), 0)
                try:
                    file_results.append(future.result(timeout=remaining))
                except FuturesTimeoutError:
                    timed_out = True
                    raise RewriteTimeoutError(f'Rewrite exceeded {self.timeout}s')
                except StylesheetError as e:
                    errors.append(str(e))
                except CssParseError as e:
                    errors.append(f'CSS parse error in {path}: {e}')
                except OSError as e:
                    logger.error("I/O error while processing %s: %s", path, e)
                    errors.append(f'Could not write cleaned file for {path}')
        finally:
            # timed-out workers are abandoned, not awaited
            executor.shutdown(wait=not timed_out, cancel_futures=True)
        return file_results

    def _write_combined(self, combined):
        try:
            atomic_write(self.combined_path, combined)
        except OSError as e:
            raise OutputWriteError(f'Could not write combined file: {e}') from e
