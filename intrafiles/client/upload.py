# intrafiles/client/upload.py
import logging
import os
from contextlib import ExitStack
from dataclasses import dataclass
from enum import Enum

from .api import ApiError

log = logging.getLogger(__name__)

UPLOADING = 'uploading'
COMPLETED = 'completed'
SKIPPED = 'skipped'
ERROR = 'error'


class UploadMode(Enum):
    SINGLE = 'single'
    MULTIPLE = 'multiple'
    BULK = 'bulk'

    @property
    def endpoint(self):
        return {
            UploadMode.SINGLE: '/api/files/upload-single',
            UploadMode.MULTIPLE: '/api/files/upload-multiple',
            UploadMode.BULK: '/api/files/bulk-upload',
        }[self]

    @property
    def field(self):
        return 'file' if self is UploadMode.SINGLE else 'files'


def select_upload_mode(count):
    if count < 1:
        raise ValueError("At least one file is required")
    if count == 1:
        return UploadMode.SINGLE
    if count <= 5:
        return UploadMode.MULTIPLE
    return UploadMode.BULK


@dataclass
class UploadProgress:
    file_name: str
    progress: int = 0
    status: str = UPLOADING


def _source_name(source):
    # a path on disk, or an already open (name, fileobj) pair
    if isinstance(source, tuple):
        return source[0]
    return os.path.basename(os.fspath(source))


class UploadOrchestrator:
    """Picks the upload endpoint from the file count and tracks per-file status."""

    def __init__(self, api):
        self.api = api
        self.files = []
        self.mode = None
        self.progress = []
        self.error = None

    def _set_files(self, files):
        self.mode = select_upload_mode(len(files))
        self.files = list(files)
        self.progress = []
        self.error = None
        return self.mode

    def select_files(self, files):
        return self._set_files(files)

    def drop_files(self, files):
        return self._set_files(files)

    def submit(self, category_id, folder_id=None, created_by=None):
        """Sends every selected file in exactly one request."""
        if not self.files or self.mode is None:
            raise ValueError("No files selected")

        self.progress = [UploadProgress(_source_name(f)) for f in self.files]
        self.error = None

        data = {'category_id': category_id}
        if folder_id is not None:
            data['folder_id'] = folder_id
        if created_by is not None:
            data['created_by'] = created_by

        try:
            with ExitStack() as stack:
                parts = []
                for source in self.files:
                    if isinstance(source, tuple):
                        parts.append(source)
                    else:
                        parts.append((_source_name(source), stack.enter_context(open(source, 'rb'))))
                response = self.api.upload(self.mode.endpoint, self.mode.field, parts, data)
        except (ApiError, OSError) as e:
            self.error = e.message if isinstance(e, ApiError) else str(e)
            log.info("Upload failed: %s", self.error)
            for item in self.progress:
                item.status = ERROR
            return None

        failed, skipped = self._unstored_names(response)
        for item in self.progress:
            if item.file_name in failed:
                item.status = ERROR
            elif item.file_name in skipped:
                item.status = SKIPPED
            else:
                item.progress = 100
                item.status = COMPLETED
        return response

    @staticmethod
    def _unstored_names(response):
        """Names the server rejected, and names a bulk upload skipped as duplicates."""
        results = response.get('results') or {}
        errors = response.get('errors')
        if errors is None:
            errors = results.get('errors') or []
        skipped = results.get('skipped') or []
        return (
            {e.get('filename') for e in errors if isinstance(e, dict)},
            {s.get('filename') for s in skipped if isinstance(s, dict)},
        )
