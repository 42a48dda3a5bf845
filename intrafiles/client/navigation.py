# intrafiles/client/navigation.py
"""
Category/folder navigation.

`NavigationContext` is an immutable value; every transition returns a new
one. `Navigator` owns the current context and the listings fetched for it.
Each refresh takes a request token and only the newest one may publish its
result, so a slow response can never overwrite a newer navigation.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from .api import ApiError

log = logging.getLogger(__name__)

CATEGORIES = 'categories'
FILES_FOLDERS = 'files-folders'

CATEGORY = 'category'
FOLDER = 'folder'


class InvalidTransition(Exception):
    pass


@dataclass(frozen=True)
class BreadcrumbItem:
    id: int
    name: str
    type: str

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'type': self.type}

    @classmethod
    def from_dict(cls, data):
        if data['type'] not in (CATEGORY, FOLDER):
            raise ValueError(f"Unknown breadcrumb type: {data['type']}")
        return cls(id=int(data['id']), name=str(data['name']), type=data['type'])


@dataclass(frozen=True)
class NavigationContext:
    view: str = CATEGORIES
    category_id: Optional[int] = None
    folder_id: Optional[int] = None
    breadcrumb: Tuple[BreadcrumbItem, ...] = field(default_factory=tuple)

    # === TRANSITIONS ===
    def enter_category(self, category):
        crumb = BreadcrumbItem(int(category['id']), category['name'], CATEGORY)
        return NavigationContext(FILES_FOLDERS, crumb.id, None, (crumb,))

    def enter_folder(self, folder):
        if self.view != FILES_FOLDERS:
            raise InvalidTransition("A folder can only be opened inside a category")
        crumb = BreadcrumbItem(int(folder['id']), folder['name'], FOLDER)
        return replace(self, folder_id=crumb.id, breadcrumb=self.breadcrumb + (crumb,))

    def click_breadcrumb(self, index):
        if not 0 <= index < len(self.breadcrumb):
            raise IndexError(f"No breadcrumb entry at {index}")
        entry = self.breadcrumb[index]
        folder_id = entry.id if entry.type == FOLDER else None
        return replace(self, folder_id=folder_id, breadcrumb=self.breadcrumb[:index + 1])

    def go_back(self):
        return NavigationContext()

    # === SCOPES ===
    def folder_scope(self):
        return {'category_id': self.category_id, 'parent_folder_id': self.folder_id}

    def file_scope(self):
        return {'category_id': self.category_id, 'folder_id': self.folder_id}

    def to_dict(self):
        return {
            'view': self.view,
            'category_id': self.category_id,
            'folder_id': self.folder_id,
            'breadcrumb': [b.to_dict() for b in self.breadcrumb],
        }

    @classmethod
    def from_dict(cls, data):
        view = data.get('view', CATEGORIES)
        if view not in (CATEGORIES, FILES_FOLDERS):
            raise ValueError(f"Unknown view: {view}")
        return cls(
            view=view,
            category_id=data.get('category_id'),
            folder_id=data.get('folder_id'),
            breadcrumb=tuple(BreadcrumbItem.from_dict(b) for b in data.get('breadcrumb') or ()),
        )


class Navigator:
    """Applies transitions and refetches the listing for the new context."""

    def __init__(self, api, context=None):
        self.api = api
        self.context = context or NavigationContext()
        self.categories = []
        self.folders = []
        self.files = []
        self.error = None
        self._lock = threading.Lock()
        self._latest_token = 0

    def enter_category(self, category):
        return self._apply(self.context.enter_category(category))

    def enter_folder(self, folder):
        return self._apply(self.context.enter_folder(folder))

    def click_breadcrumb(self, index):
        return self._apply(self.context.click_breadcrumb(index))

    def go_back(self):
        return self._apply(self.context.go_back())

    def _apply(self, context):
        with self._lock:
            self.context = context
        return self.refresh()

    def _next_token(self):
        with self._lock:
            self._latest_token += 1
            return self._latest_token

    def refresh(self):
        """
        Fetches the listing of the current context.
        Returns True only when this call's result was published.
        """
        token = self._next_token()
        context = self.context

        try:
            if context.view == CATEGORIES:
                listing = {'categories': self.api.list_categories()}
            else:
                with ThreadPoolExecutor(max_workers=2) as pool:
                    folders = pool.submit(self.api.list_folders, **context.folder_scope())
                    files = pool.submit(self.api.list_files, **context.file_scope())
                    listing = {'folders': folders.result(), 'files': files.result()}
        except ApiError as e:
            with self._lock:
                if token != self._latest_token:
                    return False
                self.error = e.message
            log.info("Navigation fetch failed: %s", e.message)
            return False

        with self._lock:
            if token != self._latest_token:
                log.debug("Dropping stale navigation response %s", token)
                return False
            if context.view == CATEGORIES:
                self.categories = listing['categories']
                self.folders, self.files = [], []
            else:
                self.folders = listing['folders']
                self.files = listing['files']
            self.error = None
        return True
