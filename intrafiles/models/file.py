# intrafiles/models/file.py
from datetime import datetime

from intrafiles import db


class FileItem(db.Model):
    __tablename__ = 'files'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    original_name = db.Column(db.String(255), nullable=False)
    file_type = db.Column(db.String(20))       # lowercased extension, no dot
    file_size = db.Column(db.BigInteger, default=0)
    mime_type = db.Column(db.String(100))
    file_path = db.Column(db.String(1000), nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey('categories.id'), nullable=False, index=True)
    folder_id = db.Column(db.Integer, db.ForeignKey('folders.id'), index=True)
    is_starred = db.Column(db.Boolean, default=False, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    download_count = db.Column(db.Integer, default=0, nullable=False)
    last_accessed = db.Column(db.DateTime, default=datetime.utcnow)

    created_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    updated_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relations
    creator = db.relationship('User', foreign_keys=[created_by])

    def to_dict(self):
        from intrafiles.utils.files import format_bytes

        return {
            'id': self.id,
            'name': self.name,
            'original_name': self.original_name,
            'file_type': self.file_type,
            'file_size': self.file_size,
            'formatted_size': format_bytes(self.file_size or 0),
            'mime_type': self.mime_type,
            'category_id': self.category_id,
            'category_name': self.category.name if self.category else None,
            'folder_id': self.folder_id,
            'folder_name': self.folder.name if self.folder else None,
            'is_starred': self.is_starred,
            'is_active': self.is_active,
            'download_count': self.download_count,
            'last_accessed': self.last_accessed.isoformat() if self.last_accessed else None,
            'created_by': self.created_by,
            'created_by_name': self.creator.name if self.creator else None,
            'updated_by': self.updated_by,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
