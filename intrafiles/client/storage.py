# intrafiles/client/storage.py
import json
import logging
import os

from .api import ApiError

log = logging.getLogger(__name__)

DEFAULT_STORAGE_PATH = os.getenv(
    'INTRAFILES_STORAGE', os.path.join(os.path.expanduser('~'), '.intrafiles', 'storage.json')
)

AUTH_TOKEN_KEY = 'authToken'
USER_DATA_KEY = 'userData'


class LocalStorage:
    """
    String key/value store persisted as one JSON object on disk.
    Reads and writes are synchronous; there is no locking between writers.
    """

    def __init__(self, path=DEFAULT_STORAGE_PATH):
        self.path = path

    def _load(self):
        try:
            with open(self.path, 'r', encoding='utf-8') as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            log.warning("Ignoring unreadable storage file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as fh:
            json.dump(data, fh)

    def get_item(self, key):
        return self._load().get(key)

    def set_item(self, key, value):
        data = self._load()
        data[key] = str(value)
        self._save(data)

    def remove_item(self, key):
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def clear(self):
        self._save({})


class ClientSession:
    """Login state kept in local storage: `authToken` and `userData`."""

    def __init__(self, api, storage):
        self.api = api
        self.storage = storage
        self.user = None
        self.error = None

    def login(self, user_name, password):
        """Returns the user on success; on failure sets `error` and stores nothing."""
        self.error = None
        try:
            data = self.api.login(user_name, password)
        except ApiError as e:
            self.error = e.message
            return None

        token, user = data.get('token'), data.get('user')
        if not token or not isinstance(user, dict):
            self.error = "Malformed server response"
            return None

        self.storage.set_item(AUTH_TOKEN_KEY, token)
        self.storage.set_item(USER_DATA_KEY, json.dumps(user))
        self.api.token = token
        self.user = user
        return user

    def restore(self):
        """Restores a stored session; corrupt or partial data is cleared."""
        token = self.storage.get_item(AUTH_TOKEN_KEY)
        raw_user = self.storage.get_item(USER_DATA_KEY)
        if not token and not raw_user:
            return None

        user = None
        if token and raw_user:
            try:
                user = json.loads(raw_user)
            except ValueError:
                user = None
        if not isinstance(user, dict) or not user.get('user_name'):
            log.info("Clearing incomplete stored session")
            self.logout()
            return None

        self.api.token = token
        self.user = user
        return user

    def logout(self):
        self.storage.remove_item(AUTH_TOKEN_KEY)
        self.storage.remove_item(USER_DATA_KEY)
        self.api.token = None
        self.user = None

    @property
    def is_authenticated(self):
        return self.user is not None and bool(self.api.token)
