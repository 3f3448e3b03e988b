import os

import pytest

from app_factory import create_app
from config import TestingConfig

SAMPLE_CSS = '.used{color:red} .dead{color:blue} .dead:hover{color:green}'


def write_file(root, relative_path, text):
    path = os.path.join(str(root), relative_path)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(text)
    return path


def read_file(path):
    with open(path, encoding='utf-8') as f:
        return f.read()


@pytest.fixture
def site_root(tmp_path):
    """Document root holding the original stylesheets"""
    root = tmp_path / 'site'
    root.mkdir()
    write_file(root, 's.css', SAMPLE_CSS)
    return root


@pytest.fixture
def app(tmp_path, site_root):
    """Flask app wired to a temporary site, ledger and output directory."""
    application = create_app(TestingConfig, overrides={
        'DOCUMENT_ROOT': str(site_root),
        'LEDGER_FILE': str(tmp_path / 'data' / 'unused_selectors.json'),
        'OUTPUT_DIR': str(tmp_path / 'out'),
        'BACKUP_DIR': str(tmp_path / 'backup'),
        'LOG_DIR': str(tmp_path / 'logs'),
    })
    return application


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def pruning_service(app):
    return app.extensions['pruning_service']
