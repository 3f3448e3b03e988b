from unittest.mock import MagicMock, patch

import pytest
import requests

from conftest import SAMPLE_CSS, write_file
from sampler import SelectorStatus, StylesheetLoader, UsageSampler
from sampler.usage_sampler import find_duplicate_selectors

PAGE = '''<html><head>
<link rel="stylesheet" href="/s.css">
</head><body><div class="used">hi</div></body></html>'''


@pytest.fixture
def loader(site_root):
    return StylesheetLoader(document_root=str(site_root), page_url='/index.html')


def statuses(result):
    return {record.selector: record.status for record in result.records}


class TestScan:
    def test_reports_unused_eligible_selectors(self, loader):
        result = UsageSampler(PAGE, loader).scan()

        assert statuses(result) == {
            '.used': SelectorStatus.USED,
            '.dead': SelectorStatus.UNUSED,
            '.dead:hover': SelectorStatus.USED,
        }
        assert result.unused == {'s.css': [{'selector': '.dead', 'media': None}]}
        assert result.unused_count == 1
        assert result.warnings == []

    def test_files_without_unused_selectors_are_still_reported(self, loader, site_root):
        write_file(site_root, 'all-used.css', '.used{x:y}')
        page = PAGE.replace('</head>', '<link rel="stylesheet" href="all-used.css"></head>')
        result = UsageSampler(page, loader).scan()
        assert result.unused['all-used.css'] == []

    def test_used_is_one_way(self, loader):
        sampler = UsageSampler(PAGE, loader)
        assert sampler.scan().unused_count == 1

        sampler.set_document(PAGE.replace('class="used"', 'class="used dead"'))
        assert sampler.scan().unused_count == 0

        sampler.set_document(PAGE)
        assert statuses(sampler.scan())['.dead'] is SelectorStatus.USED

    def test_inline_styles(self, loader):
        page = '<html><head><style>.banner{x:y} p{x:y}</style></head><body><p>x</p></body></html>'
        result = UsageSampler(page, loader).scan()
        assert result.unused == {'inline': [{'selector': '.banner', 'media': None}]}

    def test_media_is_recorded(self, loader, site_root):
        write_file(site_root, 's.css', '@media print { .only-print{color:red} }')
        result = UsageSampler(PAGE, loader).scan()
        assert result.unused == {'s.css': [{'selector': '.only-print', 'media': 'print'}]}

    def test_unmatchable_selector_treated_as_used(self, loader):
        sampler = UsageSampler(PAGE, loader)
        assert sampler._matches('.a[') is True

    def test_added_and_removed_between_scans(self, loader, site_root):
        sampler = UsageSampler(PAGE, loader)
        first = sampler.scan()
        assert first.added == [] and first.removed == []

        write_file(site_root, 's.css', '.used{color:red} .fresh{color:blue}')
        second = sampler.scan()
        assert second.added == ['.fresh']
        assert second.removed == ['.dead', '.dead:hover']

    def test_unparseable_stylesheet_is_a_warning(self, loader, site_root):
        write_file(site_root, 's.css', '.a{x:y} .b')
        result = UsageSampler(PAGE, loader).scan()
        assert result.records == []
        assert len(result.warnings) == 1



class TestDuplicates:
    def test_repeated_selectors_are_listed(self, loader, site_root):
        write_file(site_root, 's.css', '.used{color:red} .a{x:y} .used{margin:0} @media print{ .a{x:y} }')
        result = UsageSampler(PAGE, loader).scan()

        assert result.duplicates == ['.used']
        assert result.warnings == []

    def test_same_selector_across_files_is_a_duplicate(self, loader, site_root):
        write_file(site_root, 'copy.css', SAMPLE_CSS)
        page = PAGE.replace('</head>', '<link rel="stylesheet" href="/copy.css"></head>')
        result = UsageSampler(page, loader).scan()

        assert result.duplicates == ['.used', '.dead', '.dead:hover']

    def test_long_run_of_duplicates_is_a_warning(self, loader, site_root):
        block = ''.join(f'.s{i}{{x:y}}' for i in range(6))
        write_file(site_root, 's.css', block + block + '.last{x:y}')
        sampler = UsageSampler(PAGE, loader)

        with patch('sampler.usage_sampler.logger') as logger:
            first = sampler.scan()
            second = sampler.scan()

        assert len(first.duplicates) == 6
        assert first.warnings == ['Duplicated sequence of selectors: .s0, .s1, .s2, .s3, .s4, .s5']
        assert second.warnings == first.warnings
        assert logger.warning.call_count == 1

    def test_short_runs_are_not_warned(self):
        found = [('s.css', f'.s{i}', None) for i in range(5)] * 2
        duplicates, long_runs = find_duplicate_selectors(found)

        assert len(duplicates) == 5
        assert long_runs == []


class TestImports:
    def test_imported_rules_are_attributed_to_the_imported_file(self, loader, site_root):
        write_file(site_root, 's.css', '@import url("extra.css") print;\n.used{x:y}')
        write_file(site_root, 'extra.css', '.gone{x:y}')
        result = UsageSampler(PAGE, loader).scan()

        assert result.unused == {
            'extra.css': [{'selector': '.gone', 'media': 'print'}],
            's.css': [],
        }

    def test_import_cycles_are_suppressed(self, loader, site_root):
        write_file(site_root, 's.css', '@import "b.css";\n.a{x:y}')
        write_file(site_root, 'b.css', '@import "s.css";\n.b{x:y}')
        result = UsageSampler(PAGE, loader).scan()
        assert sorted(record.selector for record in result.records) == ['.a', '.b']


class TestCrossOrigin:
    def test_unreachable_stylesheet_is_skipped(self, site_root):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError('refused')
        loader = StylesheetLoader(document_root=str(site_root), page_url='https://example.com/index.html',
                                  session=session)
        page = PAGE.replace('</head>', '<link rel="stylesheet" href="https://cdn.other.net/x.css"></head>')

        result = UsageSampler(page, loader).scan()

        assert list(result.unused) == ['s.css']
        assert len(result.warnings) == 1
        assert 'cdn.other.net' in result.warnings[0]

    def test_cross_origin_sheet_fetched_over_http(self, site_root):
        response = MagicMock(text='.remote{x:y}')
        session = MagicMock()
        session.get.return_value = response
        loader = StylesheetLoader(document_root=str(site_root), page_url='https://example.com/',
                                  session=session, timeout=3)
        page = '<html><head><link rel="stylesheet" href="https://cdn.other.net/x.css"></head></html>'

        result = UsageSampler(page, loader).scan()

        session.get.assert_called_once_with('https://cdn.other.net/x.css', timeout=3)
        assert result.unused == {'x.css': [{'selector': '.remote', 'media': None}]}


class TestStylesheetLoader:
    def test_same_origin_read_from_root(self, loader):
        assert loader.load('/s.css', []).startswith('.used')

    def test_relative_href_resolved_against_page(self, site_root):
        write_file(site_root, 'blog/css/post.css', '.post{x:y}')
        loader = StylesheetLoader(document_root=str(site_root), page_url='/blog/index.html')
        assert loader.resolve('css/post.css') == '/blog/css/post.css'
        assert loader.load(loader.resolve('css/post.css'), []) == '.post{x:y}'

    def test_missing_local_file_without_origin_is_a_warning(self, loader):
        warnings = []
        assert loader.load('/nope.css', warnings) is None
        assert len(warnings) == 1
