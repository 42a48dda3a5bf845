# intrafiles/models/folder.py
from datetime import datetime

from intrafiles import db


class Folder(db.Model):
    __tablename__ = 'folders'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    description = db.Column(db.Text)
    category_id = db.Column(db.Integer, db.ForeignKey('categories.id'), nullable=False, index=True)
    parent_folder_id = db.Column(db.Integer, db.ForeignKey('folders.id'), index=True)
    path = db.Column(db.String(1000))
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    created_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    updated_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relations
    children = db.relationship('Folder', backref=db.backref('parent', remote_side=[id]), lazy='dynamic')
    files = db.relationship('FileItem', backref='folder', lazy='dynamic')
    creator = db.relationship('User', foreign_keys=[created_by])

    def ancestors(self):
        """Parents of this folder, closest first."""
        chain = []
        current = self.parent
        while current is not None and current not in chain:
            chain.append(current)
            current = current.parent
        return chain

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'category_id': self.category_id,
            'category_name': self.category.name if self.category else None,
            'parent_folder_id': self.parent_folder_id,
            'path': self.path,
            'is_active': self.is_active,
            'created_by': self.created_by,
            'created_by_name': self.creator.name if self.creator else None,
            'updated_by': self.updated_by,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
