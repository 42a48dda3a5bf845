# intrafiles/client/search.py
import json
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List
from urllib.parse import urlencode

from .api import ApiError

log = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.3
RECENT_SEARCHES_KEY = 'recentSearches'
MAX_RECENT_SEARCHES = 5

# render order
BUCKETS = ('categories', 'category_folders', 'folders', 'files', 'category_files')
BUCKET_TITLES = {
    'categories': 'Categories',
    'category_folders': 'Category folders',
    'folders': 'Folders',
    'files': 'Files',
    'category_files': 'Category files',
}


@dataclass
class SearchResults:
    categories: List[dict] = field(default_factory=list)
    category_folders: List[dict] = field(default_factory=list)
    folders: List[dict] = field(default_factory=list)
    files: List[dict] = field(default_factory=list)
    category_files: List[dict] = field(default_factory=list)

    @classmethod
    def merge(cls, general, scoped):
        """Buckets the two endpoint replies; a missing reply contributes nothing."""
        general = (general or {}).get('results') or {}
        scoped = (scoped or {}).get('results') or {}
        return cls(
            categories=list(scoped.get('categories') or []),
            category_folders=list(scoped.get('folders') or []),
            folders=list(general.get('folders') or []),
            files=list(general.get('files') or []),
            category_files=list(scoped.get('files') or []),
        )

    @property
    def total_results(self):
        return sum(len(getattr(self, name)) for name in BUCKETS)

    def sections(self):
        """(bucket, title, count, items) for every non-empty bucket, in render order."""
        for name in BUCKETS:
            items = getattr(self, name)
            if items:
                yield name, BUCKET_TITLES[name], len(items), items


def deep_link(bucket, item):
    """Where selecting a search hit navigates to."""
    if bucket == 'categories':
        params = {'category': item['id']}
    elif bucket in ('folders', 'category_folders'):
        params = {'category': item['category_id'], 'folder': item['id']}
    elif bucket in ('files', 'category_files'):
        params = {'category': item['category_id']}
        if item.get('folder_id') is not None:
            params['folder'] = item['folder_id']
        params['highlight'] = item['id']
    else:
        raise ValueError(f"Unknown result bucket: {bucket}")
    return f"/categories?{urlencode(params)}"


class RecentSearches:
    """Most recent first, at most five terms, kept under `recentSearches`."""

    def __init__(self, storage, key=RECENT_SEARCHES_KEY, limit=MAX_RECENT_SEARCHES):
        self.storage = storage
        self.key = key
        self.limit = limit

    def items(self):
        raw = self.storage.get_item(self.key)
        if not raw:
            return []
        try:
            terms = json.loads(raw)
        except ValueError:
            log.warning("Discarding unreadable recent searches")
            self.storage.remove_item(self.key)
            return []
        if not isinstance(terms, list):
            return []
        return [t for t in terms if isinstance(t, str)][:self.limit]

    def add(self, term):
        term = term.strip()
        if not term:
            return self.items()
        terms = [term] + [t for t in self.items() if t != term]
        terms = terms[:self.limit]
        self.storage.set_item(self.key, json.dumps(terms))
        return terms

    def clear(self):
        self.storage.remove_item(self.key)


class AggregatedSearch:
    """
    Fans a query out to the general and the category-scoped search endpoints.

    Each source fails on its own: an error becomes empty buckets and a log
    line. Only the newest search may publish `results`.
    """

    def __init__(self, api, recent=None, debounce=DEBOUNCE_SECONDS, on_results=None):
        self.api = api
        self.recent = recent
        self.debounce = debounce
        self.on_results = on_results
        self.query = ''
        self.results = SearchResults()
        self._lock = threading.Lock()
        self._latest_token = 0
        self._timer = None

    def _fetch(self, source, call, query):
        try:
            return call(query)
        except ApiError as e:
            log.warning("%s search failed for %r: %s", source, query, e.message)
            return None

    def search(self, query):
        """
        Runs both searches in parallel. Returns the merged results, or None
        when a newer search started meanwhile and this one was dropped.
        """
        with self._lock:
            self._latest_token += 1
            token = self._latest_token
            self.query = query or ''

        query = (query or '').strip()
        if not query:
            results = SearchResults()
        else:
            with ThreadPoolExecutor(max_workers=2) as pool:
                general = pool.submit(self._fetch, 'General', self.api.search_files, query)
                scoped = pool.submit(self._fetch, 'Category', self.api.search_categories, query)
                results = SearchResults.merge(general.result(), scoped.result())

        with self._lock:
            if token != self._latest_token:
                log.debug("Dropping stale search results for %r", query)
                return None
            self.results = results
        if self.on_results is not None:
            self.on_results(results)
        return results

    def on_query_change(self, text):
        """Restarts the debounce timer; the search runs once typing pauses."""
        self.query = text
        self.cancel_pending()
        timer = threading.Timer(self.debounce, self.search, args=(text,))
        timer.daemon = True
        self._timer = timer
        timer.start()

    def cancel_pending(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def select_result(self, bucket, item):
        """Remembers the query, clears the search box and returns the deep link."""
        link = deep_link(bucket, item)
        if self.recent is not None and self.query.strip():
            self.recent.add(self.query)
        self.cancel_pending()
        with self._lock:
            self._latest_token += 1
            self.query = ''
            self.results = SearchResults()
        return link
