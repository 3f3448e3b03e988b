import os
import threading
from unittest.mock import MagicMock, patch

from cli import ChangePrinter, main, page_url_for, read_page, watch_page
from conftest import write_file
from sampler import ScanScheduler, StylesheetLoader, UsageSampler

PAGE = '<html><head><link rel="stylesheet" href="s.css"></head><body><div class="used"></div></body></html>'


def test_page_url_for(tmp_path):
    root = str(tmp_path)
    assert page_url_for(os.path.join(root, 'blog', 'post.html'), root) == '/blog/post.html'


def test_scan_prints_summary(site_root, tmp_path, capsys):
    page = write_file(site_root, 'index.html', PAGE)

    with patch('cli.get_config') as get_config:
        get_config.return_value.DOCUMENT_ROOT = str(site_root)
        get_config.return_value.FETCH_TIMEOUT = 5
        get_config.return_value.LOG_LEVEL = 'INFO'
        get_config.return_value.LOG_DIR = str(tmp_path / 'logs')
        code = main(['scan', page, '--root', str(site_root)])

    out = capsys.readouterr().out
    assert code == 0
    assert 's.css: 1 unused' in out
    assert '.dead' in out


def test_scan_reports_to_endpoint(site_root, tmp_path):
    page = write_file(site_root, 'index.html', PAGE)

    with patch('cli.get_config') as get_config, patch('cli.UsageReporter') as reporter_class:
        get_config.return_value.DOCUMENT_ROOT = str(site_root)
        get_config.return_value.FETCH_TIMEOUT = 5
        get_config.return_value.LOG_LEVEL = 'INFO'
        get_config.return_value.LOG_DIR = str(tmp_path / 'logs')
        reporter_class.return_value.submit.return_value = {'message': 'Files generated successfully'}

        code = main(['scan', page, '--root', str(site_root),
                     '--report', 'http://localhost:5000/remove-unused-css', '--action', 'generate'])

    assert code == 0
    reporter_class.assert_called_once_with('http://localhost:5000/remove-unused-css')
    result = reporter_class.return_value.submit.call_args.args[0]
    assert result.unused == {'s.css': [{'selector': '.dead', 'media': None}]}
    assert reporter_class.return_value.submit.call_args.kwargs == {'action': 'generate'}


def test_watch_flag_builds_scheduler_from_config(site_root, tmp_path):
    page = write_file(site_root, 'index.html', PAGE)

    with patch('cli.get_config') as get_config, patch('cli.watch_page') as watch:
        get_config.return_value.DOCUMENT_ROOT = str(site_root)
        get_config.return_value.FETCH_TIMEOUT = 5
        get_config.return_value.LOG_LEVEL = 'INFO'
        get_config.return_value.LOG_DIR = str(tmp_path / 'logs')
        get_config.return_value.SCAN_INTERVAL = 2.5
        get_config.return_value.SCAN_DEBOUNCE = 0.2

        code = main(['scan', page, '--root', str(site_root), '--watch'])

    assert code == 0
    watched_page, sampler, scheduler = watch.call_args.args
    assert watched_page == page
    assert isinstance(sampler, UsageSampler)
    assert (scheduler.interval, scheduler.debounce) == (2.5, 0.2)
    assert scheduler.scan == sampler.scan
    assert isinstance(scheduler.on_result, ChangePrinter)


def test_watch_rescans_when_page_file_changes(site_root):
    page = write_file(site_root, 'index.html', PAGE)
    loader = StylesheetLoader(document_root=str(site_root), page_url='/index.html')
    sampler = UsageSampler(read_page(page), loader)
    counts = []
    stop = threading.Event()

    def on_result(result):
        counts.append(result.unused_count)
        if result.unused_count == 0:
            stop.set()

    # interval far longer than the test: only the file change can rescan
    scheduler = ScanScheduler(sampler.scan, interval=60, debounce=0.01, on_result=on_result)

    def edit_page():
        staged = write_file(site_root, 'index.html.new', PAGE.replace('class="used"', 'class="used dead"'))
        os.replace(staged, page)
        mtime = os.path.getmtime(page) + 5
        os.utime(page, (mtime, mtime))

    editor = threading.Timer(0.05, edit_page)
    give_up = threading.Timer(5, stop.set)
    editor.start()
    give_up.start()
    try:
        watch_page(page, sampler, scheduler, stop=stop)
    finally:
        give_up.cancel()

    assert counts == [1, 0]
    assert not scheduler.running


def test_change_printer_skips_repeated_results(capsys):
    result = MagicMock(warnings=[], unused={'s.css': [{'selector': '.dead', 'media': None}]}, unused_count=1)
    reporter = MagicMock()
    reporter.submit.return_value = {'message': 'Selectors saved'}
    printer = ChangePrinter(reporter, action='save')

    printer(result)
    printer(result)

    out = capsys.readouterr().out
    assert out.count('s.css: 1 unused') == 1
    reporter.submit.assert_called_once_with(result, action='save')
    assert printer.failures == 0
