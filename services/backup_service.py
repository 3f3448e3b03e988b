import os
import shutil
import logging
from datetime import datetime

from services.errors import StylesheetError
from utils.paths import INLINE_SOURCE, resolve_within_root

logger = logging.getLogger(__name__)


def create_backup(document_root, backup_root, relative_paths, now=None):
    """
    Copy the original stylesheets into a timestamped backup directory.

    Returns:
        tuple: (backup directory, list of error strings)
    """
    stamp = (now or datetime.now()).strftime('%Y-%m-%d_%H-%M-%S')
    backup_dir = os.path.join(backup_root, stamp)
    errors = []

    for relative_path in relative_paths:
        if relative_path == INLINE_SOURCE:
            continue
        try:
            source = resolve_within_root(document_root, relative_path)
            target = os.path.join(backup_dir, os.path.relpath(source, os.path.realpath(document_root)))
            os.makedirs(os.path.dirname(target), exist_ok=True)
            shutil.copy2(source, target)
        except StylesheetError as e:
            # reported again by the rewrite pass itself
            logger.debug("Backup skipped for %s: %s", relative_path, e)
        except OSError as e:
            logger.error("Backup failed for %s: %s", relative_path, e)
            errors.append(f'Backup failed for {relative_path}')

    logger.info("Backup written to %s", backup_dir)
    return backup_dir, errors
