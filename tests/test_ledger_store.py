import json
import os
import threading

import pytest

from services.errors import LedgerCorruptedError, LedgerWriteError
from utils.ledger_store import UNUSED, USED, LedgerStore


@pytest.fixture
def store(tmp_path):
    return LedgerStore(str(tmp_path / 'data' / 'ledger.json'))


class TestLoad:
    def test_missing_file_is_empty(self, store):
        assert store.load() == {}

    def test_roundtrip(self, store):
        ledger = {'s.css': {'.a': USED, '.b': UNUSED}}
        store.save(ledger)
        assert store.load() == ledger

    @pytest.mark.parametrize('content', [
        'not json',
        '[]',
        '{"s.css": ["a"]}',
        '{"s.css": {".a": "maybe"}}',
    ])
    def test_corrupted_file_raises(self, store, content):
        os.makedirs(os.path.dirname(store.path), exist_ok=True)
        with open(store.path, 'w') as f:
            f.write(content)
        with pytest.raises(LedgerCorruptedError):
            store.load()


class TestSave:
    def test_leaves_no_temp_files(self, store):
        store.save({'s.css': {}})
        assert os.listdir(os.path.dirname(store.path)) == ['ledger.json']

    def test_write_failure_raises(self, tmp_path):
        blocker = tmp_path / 'blocker'
        blocker.write_text('a file, not a directory')
        store = LedgerStore(str(blocker / 'ledger.json'))
        with pytest.raises(LedgerWriteError):
            store.save({})


class TestTransaction:
    def test_saves_on_success(self, store):
        with store.transaction() as ledger:
            ledger['s.css'] = {'.a': USED}
        with open(store.path) as f:
            assert json.load(f) == {'s.css': {'.a': USED}}

    def test_discards_on_error(self, store):
        store.save({'s.css': {'.a': UNUSED}})
        with pytest.raises(RuntimeError):
            with store.transaction() as ledger:
                ledger['s.css']['.a'] = USED
                raise RuntimeError('boom')
        assert store.load() == {'s.css': {'.a': UNUSED}}

    def test_concurrent_writers_do_not_lose_updates(self, store):
        def add(n):
            with store.transaction() as ledger:
                ledger[f'file{n}.css'] = {'.a': USED}

        threads = [threading.Thread(target=add, args=(n,)) for n in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(store.load()) == 10
