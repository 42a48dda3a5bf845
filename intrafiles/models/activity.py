# intrafiles/models/activity.py
from datetime import datetime
from enum import Enum

from intrafiles import db


class ActivityType(str, Enum):
    UPLOAD_FILE = 'upload_file'
    DELETE_FILE = 'delete_file'
    CREATE_FOLDER = 'create_folder'
    DELETE_FOLDER = 'delete_folder'
    RENAME_FILE = 'rename_file'
    RENAME_FOLDER = 'rename_folder'
    MOVE_FILE = 'move_file'
    MOVE_FOLDER = 'move_folder'
    CREATE_CATEGORY = 'create_category'
    UPDATE_CATEGORY = 'update_category'
    DELETE_CATEGORY = 'delete_category'
    UPDATE_FOLDER = 'update_folder'
    UPDATE_FILE = 'update_file'
    DOWNLOAD_FILE = 'download_file'
    STAR_FILE = 'star_file'
    UNSTAR_FILE = 'unstar_file'
    COPY_FILE = 'copy_file'


class TargetType(str, Enum):
    FILE = 'file'
    FOLDER = 'folder'
    CATEGORY = 'category'


class ActivityLog(db.Model):
    """Append-only audit row, written by intrafiles.utils.activity."""
    __tablename__ = 'activity_logs'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    activity_type = db.Column(db.String(50), nullable=False, index=True)
    target_type = db.Column(db.String(20), nullable=False)
    target_id = db.Column(db.Integer)
    target_name = db.Column(db.String(255))
    target_path = db.Column(db.String(1000))
    file_size = db.Column(db.BigInteger)
    old_value = db.Column(db.String(1000))
    new_value = db.Column(db.String(1000))
    ip_address = db.Column(db.String(45))
    user_agent = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    user = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'user_name': self.user.name if self.user else None,
            'username': self.user.user_name if self.user else None,
            'activity_type': self.activity_type,
            'target_type': self.target_type,
            'target_id': self.target_id,
            'target_name': self.target_name,
            'target_path': self.target_path,
            'file_size': self.file_size,
            'old_value': self.old_value,
            'new_value': self.new_value,
            'ip_address': self.ip_address,
            'user_agent': self.user_agent,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
