# intrafiles/models/__init__.py
from .user import User
from .category import Category
from .folder import Folder
from .file import FileItem
from .activity import ActivityLog, ActivityType, TargetType

__all__ = ['User', 'Category', 'Folder', 'FileItem', 'ActivityLog', 'ActivityType', 'TargetType']
