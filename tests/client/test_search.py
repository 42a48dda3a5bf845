"""Tests for aggregated search, recent searches and deep links."""

import threading

import pytest

from fakes import FakeApi
from intrafiles.client.search import (
    BUCKETS, AggregatedSearch, RecentSearches, SearchResults, deep_link,
)
from intrafiles.client.storage import LocalStorage


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / 'storage.json'))


@pytest.fixture
def api():
    """Both sources return hits: 2 general, 3 category-scoped."""
    fake = FakeApi()
    fake.general = {'results': {
        'folders': [{'id': 12, 'name': 'Policies', 'category_id': 5}],
        'files': [{'id': 40, 'name': 'policy.pdf', 'category_id': 5, 'folder_id': 12}],
    }}
    fake.scoped = {'results': {
        'categories': [{'id': 7, 'name': 'IT policies'}],
        'folders': [],
        'files': [
            {'id': 41, 'name': 'policy-it.pdf', 'category_id': 7, 'folder_id': None},
            {'id': 40, 'name': 'policy.pdf', 'category_id': 5, 'folder_id': 12},
        ],
    }}
    return fake


class TestSearchResults:
    """Tests for bucketing and totals."""

    def test_merge_fills_five_buckets(self, api):
        """Test each source lands in its own buckets with no de-duplication."""
        results = SearchResults.merge(api.general, api.scoped)

        assert [c['id'] for c in results.categories] == [7]
        assert results.category_folders == []
        assert [f['id'] for f in results.folders] == [12]
        assert [f['id'] for f in results.files] == [40]
        assert [f['id'] for f in results.category_files] == [41, 40]
        assert results.total_results == 5

    def test_sections_skip_empty_buckets_in_order(self, api):
        """Test only non-empty buckets render, in the fixed order, with counts."""
        sections = list(SearchResults.merge(api.general, api.scoped).sections())

        assert [(name, count) for name, _, count, _ in sections] == [
            ('categories', 1), ('folders', 1), ('files', 1), ('category_files', 2),
        ]
        assert [name for name, *_ in sections] == [b for b in BUCKETS if b != 'category_folders']

    def test_both_missing_is_empty(self):
        """Test no reply at all gives zero results and no section."""
        results = SearchResults.merge(None, None)

        assert results.total_results == 0
        assert list(results.sections()) == []


class TestAggregatedSearch:
    """Tests for the fan-out search."""

    def test_search_queries_both_sources(self, api):
        """Test one search hits both endpoints with the trimmed query."""
        search = AggregatedSearch(api)

        results = search.search('  policy ')

        assert api.calls_to('search_files') == [{'query': 'policy'}]
        assert api.calls_to('search_categories') == [{'query': 'policy'}]
        assert results.total_results == 5
        assert search.results is results

    def test_one_source_failing(self, api):
        """Test a failing source contributes empty buckets only."""
        api.fail.add('search_categories')

        results = AggregatedSearch(api).search('policy')

        assert results.total_results == 2
        assert results.categories == [] and results.category_files == []

    def test_both_sources_failing(self, api):
        """Test total failure looks like no results."""
        api.fail.update({'search_files', 'search_categories'})

        results = AggregatedSearch(api).search('policy')

        assert results.total_results == 0
        assert list(results.sections()) == []

    def test_blank_query_makes_no_request(self, api):
        """Test whitespace does not reach the server."""
        results = AggregatedSearch(api).search('   ')

        assert api.calls == []
        assert results.total_results == 0

    def test_stale_search_is_dropped(self, api):
        """Test a search overtaken by a newer one does not publish."""
        search = AggregatedSearch(api)
        original = api.search_files

        def overtaken(query):
            if query == 'old':
                search.search('new')
            return original(query)

        api.search_files = overtaken

        assert search.search('old') is None
        assert search.query == 'new'
        assert search.results.total_results == 5

    def test_debounce_runs_last_text_once(self, api):
        """Test rapid typing triggers a single search for the final text."""
        done = threading.Event()
        search = AggregatedSearch(api, debounce=0.05, on_results=lambda r: done.set())

        for text in ('p', 'po', 'pol', 'policy'):
            search.on_query_change(text)

        assert done.wait(2)
        assert api.calls_to('search_files') == [{'query': 'policy'}]

    def test_select_result_records_and_clears(self, api, storage):
        """Test selecting a hit stores the query and resets the search box."""
        recent = RecentSearches(storage)
        search = AggregatedSearch(api, recent=recent)
        search.search('policy')

        link = search.select_result('files', search.results.files[0])

        assert link == '/categories?category=5&folder=12&highlight=40'
        assert recent.items() == ['policy']
        assert search.query == ''
        assert search.results.total_results == 0


class TestDeepLink:
    """Tests for result URLs."""

    def test_category_link(self):
        assert deep_link('categories', {'id': 7}) == '/categories?category=7'

    def test_folder_link(self):
        link = deep_link('category_folders', {'id': 12, 'category_id': 5})
        assert link == '/categories?category=5&folder=12'

    def test_root_file_link_has_no_folder(self):
        link = deep_link('category_files', {'id': 41, 'category_id': 7, 'folder_id': None})
        assert link == '/categories?category=7&highlight=41'

    def test_unknown_bucket(self):
        with pytest.raises(ValueError):
            deep_link('users', {'id': 1})


class TestRecentSearches:
    """Tests for the recency-bounded list."""

    def test_never_more_than_five(self, storage):
        """Test the list keeps the five newest terms."""
        recent = RecentSearches(storage)

        for term in ('a', 'b', 'c', 'd', 'e', 'f', 'g'):
            recent.add(term)

        assert recent.items() == ['g', 'f', 'e', 'd', 'c']

    def test_re_adding_hoists_without_duplicate(self, storage):
        """Test a known term moves to the front once."""
        recent = RecentSearches(storage)
        for term in ('budget', 'policy', 'payroll'):
            recent.add(term)

        recent.add('budget')

        assert recent.items() == ['budget', 'payroll', 'policy']

    def test_persisted_under_recent_searches(self, storage):
        """Test the list survives a new instance over the same storage."""
        RecentSearches(storage).add('policy')

        assert RecentSearches(storage).items() == ['policy']
        assert storage.get_item('recentSearches') == '["policy"]'

    def test_corrupt_value_is_discarded(self, storage):
        """Test unreadable stored data reads as empty and is removed."""
        storage.set_item('recentSearches', '{not json')

        assert RecentSearches(storage).items() == []
        assert storage.get_item('recentSearches') is None
