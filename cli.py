import argparse
import os
import sys
import threading

from config import get_config
from config.logging import setup_logging
from sampler import ReportError, ScanScheduler, StylesheetLoader, UsageReporter, UsageSampler


def build_parser():
    config = get_config()
    parser = argparse.ArgumentParser(prog='css-pruner', description='Unused CSS selector tools')
    commands = parser.add_subparsers(dest='command', required=True)

    scan = commands.add_parser('scan', help='Scan a local page and report its unused selectors')
    scan.add_argument('page', help='HTML file to scan')
    scan.add_argument('--root', default=config.DOCUMENT_ROOT, help='Document root of the site')
    scan.add_argument('--url', default=None, help='URL the page is served from')
    scan.add_argument('--report', default=None, metavar='ENDPOINT', help='Send the result to this endpoint')
    scan.add_argument('--action', choices=('save', 'generate'), default='save')
    scan.add_argument('--timeout', type=float, default=config.FETCH_TIMEOUT, help='Stylesheet fetch timeout')
    scan.add_argument('--watch', action='store_true',
                      help='Keep scanning every SCAN_INTERVAL and whenever the page file changes')
    return parser


def page_url_for(page, root):
    """Root-relative URL of a page file inside the document root"""
    relative = os.path.relpath(os.path.abspath(page), os.path.abspath(root))
    return '/' + relative.replace(os.sep, '/')


def read_page(page):
    with open(page, encoding='utf-8') as f:
        return f.read()


def print_summary(result):
    for warning in result.warnings:
        print(f'warning: {warning}', file=sys.stderr)
    for source_file, entries in sorted(result.unused.items()):
        print(f'{source_file}: {len(entries)} unused')
        for entry in entries:
            media = f"  @media {entry['media']}" if entry['media'] else ''
            print(f"  {entry['selector']}{media}")
    print(f'{result.unused_count} unused selectors in {len(result.unused)} stylesheets')


def submit_report(reporter, result, action):
    """Send one result; False (and a message on stderr) if the endpoint refused it"""
    try:
        response = reporter.submit(result, action=action)
    except ReportError as e:
        print(f'error: {e}', file=sys.stderr)
        return False
    print(response.get('message', 'Report sent'))
    return True


class ChangePrinter:
    """
    on_result callback for watch mode. A result is printed, and reported
    when an endpoint is set, only if its unused selectors differ from the
    last one printed.
    """

    def __init__(self, reporter=None, action='save'):
        self.reporter = reporter
        self.action = action
        self.last_unused = None
        self.failures = 0

    def __call__(self, result):
        unused = result.unused
        if unused == self.last_unused:
            return
        self.last_unused = unused
        print_summary(result)
        if self.reporter is not None and not submit_report(self.reporter, result, self.action):
            self.failures += 1


def watch_page(page, sampler, scheduler, stop=None):
    """
    Scan now, then let the scheduler scan on its interval until Ctrl-C
    (or ``stop`` is set).

    The page file is polled every debounce period; a new modification
    time swaps the re-read document into the sampler and is reported to
    the scheduler as a childList mutation.
    """
    stop = stop or threading.Event()
    last_mtime = os.path.getmtime(page)
    scheduler.start()
    try:
        scheduler.trigger()
        while not stop.wait(scheduler.debounce):
            mtime = os.path.getmtime(page)
            if mtime == last_mtime:
                continue
            last_mtime = mtime
            sampler.set_document(read_page(page))
            scheduler.notify_mutation('childList')
    except KeyboardInterrupt:
        pass
    finally:
        scheduler.stop()


def run_scan(args):
    loader = StylesheetLoader(
        document_root=args.root,
        page_url=args.url or page_url_for(args.page, args.root),
        timeout=args.timeout,
    )
    sampler = UsageSampler(read_page(args.page), loader)
    reporter = UsageReporter(args.report) if args.report else None

    if args.watch:
        config = get_config()
        output = ChangePrinter(reporter, args.action)
        scheduler = ScanScheduler(
            sampler.scan,
            interval=config.SCAN_INTERVAL,
            debounce=config.SCAN_DEBOUNCE,
            on_result=output,
        )
        print(f'Watching {args.page}, Ctrl-C to stop', file=sys.stderr)
        watch_page(args.page, sampler, scheduler)
        return 1 if output.failures else 0

    result = sampler.scan()
    print_summary(result)
    if reporter is not None and not submit_report(reporter, result, args.action):
        return 1
    return 0


def main(argv=None):
    config = get_config()
    setup_logging(log_level=config.LOG_LEVEL, log_dir=config.LOG_DIR)

    args = build_parser().parse_args(argv)
    if args.command == 'scan':
        return run_scan(args)
    return 2


if __name__ == '__main__':
    sys.exit(main())
