# intrafiles/routes/folders.py
from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from intrafiles import db
from intrafiles.models import ActivityType, Category, FileItem, Folder, TargetType
from intrafiles.utils.activity import (
    log_activity, log_folder_create, log_folder_delete, log_folder_move, log_folder_rename,
)
from intrafiles.utils.files import get_folder_breadcrumb
from intrafiles.utils.params import parse_bool, parse_int, parse_nullable_id

folders_bp = Blueprint('folders', __name__)


# === HELPERS ===
def build_path(name, parent):
    return f"{parent.path or parent.name}/{name}" if parent else name


def refresh_child_paths(folder):
    for child in folder.children:
        child.path = build_path(child.name, folder)
        refresh_child_paths(child)


def resolve_parent(parent_id, category_id, folder=None):
    """
    Returns (parent, error). The parent must exist and be active, live in the same category
    and must not be the folder itself or one of its descendants.
    """
    if parent_id is None:
        return None, None

    parent = db.session.get(Folder, parent_id)
    if parent is None or not parent.is_active:
        return None, "Invalid parent_folder_id"
    if parent.category_id != category_id:
        return None, "Parent folder belongs to another category"
    if folder is not None:
        if parent.id == folder.id:
            return None, "Folder cannot be its own parent"
        if folder in parent.ancestors():
            return None, "Folder cannot be moved inside one of its subfolders"
    return parent, None


def folder_tree(folders, parent_id=None):
    return [
        {
            'id': f.id,
            'name': f.name,
            'parent_folder_id': f.parent_folder_id,
            'path': f.path,
            'children': folder_tree(folders, f.id),
        }
        for f in folders if f.parent_folder_id == parent_id
    ]


# === ROUTES ===
#route to list folders of a category, parent_folder_id=null for the top level
@folders_bp.route('', methods=['GET'])
@login_required
def list_folders():
    query = Folder.query

    category_id = parse_int(request.args.get('category_id'), 'category_id')
    if category_id:
        query = query.filter(Folder.category_id == category_id)

    has_parent, parent_id = parse_nullable_id(request.args.get('parent_folder_id'), 'parent_folder_id')
    if has_parent:
        query = query.filter(Folder.parent_folder_id == parent_id)

    is_active = parse_bool(request.args.get('is_active'), default=True)
    query = query.filter(Folder.is_active == is_active)

    folders = query.order_by(Folder.name.asc()).all()
    return jsonify({
        "message": "Folders retrieved successfully",
        "folders": [f.to_dict() for f in folders],
    })


@folders_bp.route('', methods=['POST'])
@login_required
def create_folder():
    data = request.get_json(silent=True) or {}
    name = str(data.get('name') or '').strip()
    category_id = parse_int(data.get('category_id'), 'category_id')

    if not name or not category_id:
        return jsonify({"error": "Name and category_id are required"}), 400

    category = db.session.get(Category, category_id)
    if category is None or not category.is_active:
        return jsonify({"error": "Invalid category_id"}), 400

    _, parent_id = parse_nullable_id(data.get('parent_folder_id'), 'parent_folder_id')
    parent, error = resolve_parent(parent_id, category.id)
    if error:
        return jsonify({"error": error}), 400

    folder = Folder(
        name=name,
        description=(data.get('description') or '').strip(),
        category_id=category.id,
        parent_folder_id=parent.id if parent else None,
        path=(data.get('path') or '').strip() or build_path(name, parent),
        created_by=current_user.id,
    )
    db.session.add(folder)
    db.session.commit()

    log_folder_create(current_user.id, folder.id, folder.name, request=request)
    return jsonify({
        "message": "Folder created successfully",
        "folder_id": folder.id,
        "folder": folder.to_dict(),
    }), 201


@folders_bp.route('/<int:folder_id>', methods=['GET'])
@login_required
def get_folder(folder_id):
    folder = db.get_or_404(Folder, folder_id, description="Folder not found")
    return jsonify({"message": "Folder retrieved successfully", "folder": folder.to_dict()})


#route to rename, describe or move a folder
@folders_bp.route('/<int:folder_id>', methods=['PUT'])
@login_required
def update_folder(folder_id):
    folder = db.get_or_404(Folder, folder_id, description="Folder not found")
    data = request.get_json(silent=True) or {}

    old_name = folder.name
    old_path = folder.path
    old_parent_id = folder.parent_folder_id

    if 'name' in data:
        name = str(data.get('name') or '').strip()
        if not name:
            return jsonify({"error": "Folder name cannot be empty"}), 400
        folder.name = name

    category_id = folder.category_id
    if data.get('category_id') is not None:
        category_id = parse_int(data.get('category_id'), 'category_id')
        if category_id != folder.category_id:
            category = db.session.get(Category, category_id)
            if category is None or not category.is_active:
                return jsonify({"error": "Invalid category_id"}), 400
            if folder.children.count() or folder.files.count():
                return jsonify({"error": "Only an empty folder can change category"}), 400

    parent = folder.parent
    if 'parent_folder_id' in data:
        _, parent_id = parse_nullable_id(data.get('parent_folder_id'), 'parent_folder_id')
        parent, error = resolve_parent(parent_id, category_id, folder)
        if error:
            return jsonify({"error": error}), 400
    elif parent is not None and parent.category_id != category_id:
        parent = None

    folder.category_id = category_id
    folder.parent = parent
    new_parent_id = parent.id if parent else None
    renamed = folder.name != old_name
    moved = new_parent_id != old_parent_id

    if 'description' in data:
        folder.description = (data.get('description') or '').strip()
    if 'is_active' in data:
        folder.is_active = parse_bool(data['is_active'], default=folder.is_active)

    if data.get('path'):
        folder.path = str(data['path']).strip()
    elif renamed or moved:
        folder.path = build_path(folder.name, parent)
    refresh_child_paths(folder)

    folder.updated_by = current_user.id
    db.session.commit()

    if renamed:
        log_folder_rename(current_user.id, folder.id, old_name, folder.name, request=request)
    if moved:
        log_folder_move(current_user.id, folder.id, folder.name, old_path, folder.path, request=request)
    if not renamed and not moved:
        log_activity(current_user.id, ActivityType.UPDATE_FOLDER, TargetType.FOLDER,
                     folder.id, folder.name, folder.path, request=request)

    return jsonify({"message": "Folder updated successfully", "folder": folder.to_dict()})


#route to delete a folder (logical), only when it is empty
@folders_bp.route('/<int:folder_id>', methods=['DELETE'])
@login_required
def delete_folder(folder_id):
    folder = db.get_or_404(Folder, folder_id, description="Folder not found")

    if folder.children.filter_by(is_active=True).count():
        return jsonify({"error": "Cannot delete folder with child folders"}), 400
    if FileItem.query.filter_by(folder_id=folder.id, is_active=True).count():
        return jsonify({"error": "Cannot delete folder containing files"}), 400

    folder.is_active = False
    folder.updated_by = current_user.id
    db.session.commit()

    log_folder_delete(current_user.id, folder.id, folder.name, request=request)
    return jsonify({"message": "Folder deleted successfully", "id": folder.id})


@folders_bp.route('/tree/<int:category_id>', methods=['GET'])
@login_required
def get_folder_tree(category_id):
    db.get_or_404(Category, category_id, description="Category not found")
    folders = (
        Folder.query.filter_by(category_id=category_id, is_active=True)
        .order_by(Folder.name.asc())
        .all()
    )
    return jsonify({"message": "Folder tree retrieved successfully", "tree": folder_tree(folders)})


#route for the breadcrumb of a folder, from its category down to the folder
@folders_bp.route('/<int:folder_id>/path', methods=['GET'])
@login_required
def get_folder_path(folder_id):
    folder = db.get_or_404(Folder, folder_id, description="Folder not found")
    crumbs = [{'id': folder.category_id, 'name': folder.category.name, 'type': 'category'}]
    crumbs += [{'id': f.id, 'name': f.name, 'type': 'folder'} for f in get_folder_breadcrumb(folder)]
    return jsonify({"path": crumbs})
