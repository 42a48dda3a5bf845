# intrafiles/client/api.py
import logging
import os
from urllib.parse import urlencode

import requests

log = logging.getLogger(__name__)

DEFAULT_BASE_URL = os.getenv('INTRAFILES_API_URL', 'http://localhost:5000')
DEFAULT_TIMEOUT = 20


class ApiError(Exception):
    """A failed API call. `status` is None for transport failures."""

    def __init__(self, status, message):
        super().__init__(message)
        self.status = status
        self.message = message


def _null_id(value):
    return 'null' if value is None else str(value)


class ApiClient:
    """Thin JSON client over the intrafiles REST API."""

    def __init__(self, base_url=DEFAULT_BASE_URL, token=None, session=None, timeout=DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    def _headers(self):
        headers = {'Accept': 'application/json'}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    def _request(self, method, path, **kwargs):
        url = f'{self.base_url}{path}'
        try:
            r = self.session.request(method, url, headers=self._headers(), timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            log.warning("%s %s failed: %s", method, path, e)
            raise ApiError(None, "Network error, please try again") from e

        if r.status_code >= 400:
            try:
                body = r.json()
            except ValueError:
                body = None
            message = (body.get('error') if isinstance(body, dict) else None) or r.reason or f"HTTP {r.status_code}"
            log.info("%s %s -> %s %s", method, path, r.status_code, message)
            raise ApiError(r.status_code, message)

        if not r.content:
            return {}
        try:
            return r.json()
        except ValueError as e:
            raise ApiError(r.status_code, "Malformed server response") from e

    # === AUTH ===
    def login(self, user_name, password):
        return self._request('POST', '/api/auth/login', json={'user_name': user_name, 'password': password})

    def me(self):
        return self._request('GET', '/api/auth/me')['user']

    # === CATEGORIES ===
    def list_categories(self, **filters):
        return self._request('GET', '/api/categories', params=filters)['categories']

    def create_category(self, name, **fields):
        return self._request('POST', '/api/categories', json={'name': name, **fields})['category']

    def update_category(self, category_id, **fields):
        return self._request('PUT', f'/api/categories/{category_id}', json=fields)['category']

    def delete_category(self, category_id):
        return self._request('DELETE', f'/api/categories/{category_id}')

    # === FOLDERS ===
    def list_folders(self, category_id, parent_folder_id=None):
        params = {'category_id': category_id, 'parent_folder_id': _null_id(parent_folder_id)}
        return self._request('GET', '/api/folders', params=params)['folders']

    def create_folder(self, name, category_id, parent_folder_id=None, **fields):
        payload = {'name': name, 'category_id': category_id, 'parent_folder_id': parent_folder_id, **fields}
        return self._request('POST', '/api/folders', json=payload)['folder']

    def update_folder(self, folder_id, **fields):
        return self._request('PUT', f'/api/folders/{folder_id}', json=fields)['folder']

    def delete_folder(self, folder_id):
        return self._request('DELETE', f'/api/folders/{folder_id}')

    def folder_path(self, folder_id):
        return self._request('GET', f'/api/folders/{folder_id}/path')['path']

    # === FILES ===
    def list_files(self, category_id, folder_id=None, **filters):
        params = {'category_id': category_id, 'folder_id': _null_id(folder_id), **filters}
        return self._request('GET', '/api/files', params=params)['files']

    def upload(self, endpoint, field, files, data):
        """POSTs multipart `files` as (name, fileobj) pairs, all under `field`."""
        parts = [(field, (name, fileobj)) for name, fileobj in files]
        return self._request('POST', endpoint, files=parts, data=data)

    def update_file(self, file_id, **fields):
        return self._request('PUT', f'/api/files/{file_id}', json=fields)['file']

    def toggle_star(self, file_id, is_starred=None):
        payload = {} if is_starred is None else {'is_starred': is_starred}
        return self._request('PATCH', f'/api/files/{file_id}/star', json=payload)['is_starred']

    def delete_file(self, file_id):
        return self._request('DELETE', f'/api/files/{file_id}')

    def move_files(self, file_ids, category_id, folder_id=None):
        payload = {'file_ids': list(file_ids), 'target_category_id': category_id, 'target_folder_id': folder_id}
        return self._request('POST', '/api/files/move-multiple', json=payload)['results']

    def copy_files(self, file_ids, category_id, folder_id=None):
        payload = {'file_ids': list(file_ids), 'target_category_id': category_id, 'target_folder_id': folder_id}
        return self._request('POST', '/api/files/copy-multiple', json=payload)['results']

    def delete_files(self, file_ids):
        return self._request('DELETE', '/api/files/bulk/delete', json={'ids': list(file_ids)})['results']

    def download_url(self, file_id, user_id=None, preview=False):
        params = {}
        if user_id is not None:
            params['user_id'] = user_id
        if preview:
            params['preview'] = 'true'
        query = f'?{urlencode(params)}' if params else ''
        return f'{self.base_url}/api/files/{file_id}/download{query}'

    def download(self, file_id, user_id=None):
        try:
            r = self.session.get(self.download_url(file_id, user_id), timeout=self.timeout)
        except requests.RequestException as e:
            raise ApiError(None, "Network error, please try again") from e
        if r.status_code >= 400:
            raise ApiError(r.status_code, f"Download failed ({r.status_code})")
        return r.content

    # === SEARCH ===
    def search_files(self, query):
        return self._request('GET', '/api/files/search', params={'q': query})

    def search_categories(self, query, category_id=None):
        params = {'q': query}
        if category_id is not None:
            params['category_id'] = category_id
        return self._request('GET', '/api/search', params=params)
