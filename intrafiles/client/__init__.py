# intrafiles/client/__init__.py
from .api import ApiClient, ApiError
from .navigation import BreadcrumbItem, InvalidTransition, NavigationContext, Navigator
from .preview import FileKind, Preview, PreviewWidget, classify, preview_for
from .search import AggregatedSearch, RecentSearches, SearchResults, deep_link
from .storage import ClientSession, LocalStorage
from .upload import UploadMode, UploadOrchestrator, UploadProgress, select_upload_mode

__all__ = [
    'ApiClient', 'ApiError',
    'BreadcrumbItem', 'InvalidTransition', 'NavigationContext', 'Navigator',
    'FileKind', 'Preview', 'PreviewWidget', 'classify', 'preview_for',
    'AggregatedSearch', 'RecentSearches', 'SearchResults', 'deep_link',
    'ClientSession', 'LocalStorage',
    'UploadMode', 'UploadOrchestrator', 'UploadProgress', 'select_upload_mode',
]
