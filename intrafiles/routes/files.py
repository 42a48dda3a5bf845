# intrafiles/routes/files.py
import os
from datetime import datetime

from flask import Blueprint, current_app, jsonify, request, send_file
from flask_login import current_user, login_required
from sqlalchemy import func, or_
from werkzeug.utils import secure_filename

from intrafiles import db
from intrafiles.models import ActivityType, Category, FileItem, Folder, TargetType, User
from intrafiles.utils.activity import (
    log_activity, log_file_delete, log_file_move, log_file_rename, log_file_upload,
)
from intrafiles.utils.files import (
    UploadRejected, copy_stored_file, format_bytes, get_folder_breadcrumb, is_inside_upload_folder,
    remove_stored_file, save_upload,
)
from intrafiles.utils.params import parse_bool, parse_int, parse_nullable_id

files_bp = Blueprint('files', __name__)


# === HELPERS ===
def folder_path(folder):
    if folder is None:
        return None
    return folder.path or "/".join(f.name for f in get_folder_breadcrumb(folder))


def stored_path(file):
    folder = folder_path(file.folder)
    return f"{folder}/{file.name}" if folder else file.name


def resolve_folder(folder_id, category_id):
    """Returns (folder, error); the folder must be active and belong to the category."""
    if folder_id is None:
        return None, None
    folder = db.session.get(Folder, folder_id)
    if folder is None or not folder.is_active:
        return None, "Invalid folder_id"
    if folder.category_id != category_id:
        return None, "Folder does not belong to this category"
    return folder, None


def upload_target():
    """
    Reads category_id / folder_id / created_by from the upload form.
    Returns (category, folder, user_id, error).
    """
    category_id = parse_int(request.form.get('category_id'), 'category_id')
    if not category_id:
        return None, None, None, "category_id is required"

    category = db.session.get(Category, category_id)
    if category is None or not category.is_active:
        return None, None, None, "Invalid category_id"

    _, folder_id = parse_nullable_id(request.form.get('folder_id'), 'folder_id')
    folder, error = resolve_folder(folder_id, category.id)
    if error:
        return None, None, None, error

    created_by = parse_int(request.form.get('created_by'), 'created_by') or current_user.id
    if created_by != current_user.id:
        user = db.session.get(User, created_by)
        if user is None or not user.is_active:
            return None, None, None, "Invalid created_by user"

    return category, folder, created_by, None


def store_file(storage, category, folder, user_id):
    original_name, filepath, size, file_type = save_upload(storage)
    item = FileItem(
        name=original_name,
        original_name=original_name,
        file_type=file_type,
        file_size=size,
        mime_type=storage.mimetype,
        file_path=filepath,
        category_id=category.id,
        folder_id=folder.id if folder else None,
        created_by=user_id,
    )
    db.session.add(item)
    db.session.commit()
    log_file_upload(user_id, item.id, item.name, stored_path(item), item.file_size, request=request)
    return item


def find_duplicate(name, category, folder):
    return FileItem.query.filter_by(
        original_name=name,
        category_id=category.id,
        folder_id=folder.id if folder else None,
        is_active=True,
    ).first()


def uploaded_entry(item):
    return {
        'file_id': item.id,
        'original_name': item.original_name,
        'file_size': format_bytes(item.file_size),
    }


# === LISTING ===
#route to list the files of a category, folder_id=null for the category root
@files_bp.route('', methods=['GET'])
@login_required
def list_files():
    query = FileItem.query

    category_id = parse_int(request.args.get('category_id'), 'category_id')
    if category_id:
        query = query.filter(FileItem.category_id == category_id)

    has_folder, folder_id = parse_nullable_id(request.args.get('folder_id'), 'folder_id')
    if has_folder:
        query = query.filter(FileItem.folder_id == folder_id)

    file_type = request.args.get('file_type')
    if file_type:
        query = query.filter(FileItem.file_type == file_type.lower())

    is_starred = parse_bool(request.args.get('is_starred'))
    if is_starred is not None:
        query = query.filter(FileItem.is_starred == is_starred)

    is_active = parse_bool(request.args.get('is_active'), default=True)
    query = query.filter(FileItem.is_active == is_active)

    search = (request.args.get('search') or '').strip()
    if search:
        like = f"%{search}%"
        query = query.filter(or_(FileItem.name.ilike(like), FileItem.original_name.ilike(like)))

    total = query.count()
    query = query.order_by(FileItem.created_at.desc(), FileItem.id.desc())

    limit = parse_int(request.args.get('limit'), 'limit')
    offset = parse_int(request.args.get('offset'), 'offset')
    if offset:
        query = query.offset(offset)
    if limit:
        query = query.limit(limit)

    return jsonify({
        "message": "Files retrieved successfully",
        "files": [f.to_dict() for f in query.all()],
        "total": total,
    })


#route for the general search over file and folder names
@files_bp.route('/search', methods=['GET'])
@login_required
def search_files():
    query = (request.args.get('q') or '').strip()
    if not query:
        return jsonify({"error": "Search query is required"}), 400

    search_type = request.args.get('type')
    like = f"%{query}%"
    results = {'files': [], 'folders': []}

    if not search_type or search_type == 'file':
        files = (
            FileItem.query.filter(FileItem.is_active.is_(True), FileItem.name.ilike(like))
            .order_by(FileItem.name.asc())
            .limit(100)
            .all()
        )
        results['files'] = [f.to_dict() for f in files]

    if not search_type or search_type == 'folder':
        folders = (
            Folder.query.filter(Folder.is_active.is_(True), Folder.name.ilike(like))
            .order_by(Folder.name.asc())
            .limit(100)
            .all()
        )
        results['folders'] = [f.to_dict() for f in folders]

    return jsonify({
        "query": query,
        "results": results,
        "totalResults": len(results['files']) + len(results['folders']),
    })


# === UPLOADS ===
@files_bp.route('/upload-single', methods=['POST'])
@login_required
def upload_single():
    category, folder, user_id, error = upload_target()
    if error:
        return jsonify({"error": error}), 400

    storage = request.files.get('file')
    if storage is None or not storage.filename:
        return jsonify({"error": "No file uploaded"}), 400

    try:
        item = store_file(storage, category, folder, user_id)
    except UploadRejected as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"message": "File uploaded successfully", "file": item.to_dict()}), 201


@files_bp.route('/upload-multiple', methods=['POST'])
@login_required
def upload_multiple():
    category, folder, user_id, error = upload_target()
    if error:
        return jsonify({"error": error}), 400

    uploads = [f for f in request.files.getlist('files') if f and f.filename]
    if not uploads:
        return jsonify({"error": "No files uploaded"}), 400

    max_files = current_app.config['MAX_FILES_PER_REQUEST']
    if len(uploads) > max_files:
        return jsonify({"error": f"Too many files (max {max_files} per request)"}), 400

    uploaded, errors = [], []
    for storage in uploads:
        try:
            uploaded.append(store_file(storage, category, folder, user_id))
        except UploadRejected as e:
            errors.append({'filename': storage.filename, 'error': str(e)})

    if not uploaded:
        return jsonify({"error": "No file could be uploaded", "errors": errors}), 400

    return jsonify({
        "message": f"{len(uploaded)} file(s) uploaded successfully",
        "files": [f.to_dict() for f in uploaded],
        "errors": errors,
    }), 201


#route for bulk uploads; same-name files already in place are skipped unless overwrite
@files_bp.route('/bulk-upload', methods=['POST'])
@login_required
def bulk_upload():
    category, folder, user_id, error = upload_target()
    if error:
        return jsonify({"error": error}), 400

    uploads = [f for f in request.files.getlist('files') if f and f.filename]
    if not uploads:
        return jsonify({"error": "No files uploaded"}), 400

    max_files = current_app.config['BULK_MAX_FILES']
    if len(uploads) > max_files:
        return jsonify({"error": f"Too many files (max {max_files} per bulk upload)"}), 400

    overwrite = parse_bool(request.form.get('overwrite'), default=False)
    results = {'uploaded': [], 'skipped': [], 'errors': [], 'total': len(uploads)}

    for storage in uploads:
        name = secure_filename(storage.filename)
        existing = find_duplicate(name, category, folder) if name else None

        if existing is not None and not overwrite:
            results['skipped'].append({'filename': name, 'reason': "File already exists"})
            continue

        try:
            item = store_file(storage, category, folder, user_id)
        except UploadRejected as e:
            results['errors'].append({'filename': storage.filename, 'error': str(e)})
            continue

        if existing is not None:
            remove_stored_file(existing.file_path)
            db.session.delete(existing)
            db.session.commit()
        results['uploaded'].append(uploaded_entry(item))

    return jsonify({
        "message": (
            f"Bulk upload completed: {len(results['uploaded'])} uploaded, "
            f"{len(results['skipped'])} skipped, {len(results['errors'])} errors"
        ),
        "results": results,
    })


# === BATCH OPERATIONS ===
def batch_ids(data, key):
    ids = data.get(key)
    return ids if isinstance(ids, list) and ids else None


def batch_file(file_id):
    try:
        file = db.session.get(FileItem, int(file_id))
    except (TypeError, ValueError):
        return None
    return file if file is not None and file.is_active else None


def batch_target(data):
    """Returns (category, folder, error) for the destination of a move or copy."""
    category_id = parse_int(data.get('target_category_id'), 'target_category_id')
    if not category_id:
        return None, None, "target_category_id is required"

    category = db.session.get(Category, category_id)
    if category is None or not category.is_active:
        return None, None, "Invalid target_category_id"

    _, folder_id = parse_nullable_id(data.get('target_folder_id'), 'target_folder_id')
    folder, error = resolve_folder(folder_id, category.id)
    if error:
        return None, None, "Invalid target_folder_id for this category"
    return category, folder, None


#route to move several files into one category/folder
@files_bp.route('/move-multiple', methods=['POST'])
@login_required
def move_multiple():
    data = request.get_json(silent=True) or {}
    file_ids = batch_ids(data, 'file_ids')
    if file_ids is None:
        return jsonify({"error": "file_ids array is required"}), 400

    category, folder, error = batch_target(data)
    if error:
        return jsonify({"error": error}), 400

    results = {'moved': [], 'errors': []}
    for file_id in file_ids:
        file = batch_file(file_id)
        if file is None:
            results['errors'].append({'file_id': file_id, 'error': "File not found"})
            continue

        old_path = stored_path(file)
        file.category_id = category.id
        file.folder = folder
        file.updated_by = current_user.id
        db.session.commit()

        log_file_move(current_user.id, file.id, file.name, old_path, stored_path(file), request=request)
        results['moved'].append({'file_id': file.id, 'name': file.name})

    return jsonify({
        "message": f"Move completed: {len(results['moved'])} moved, {len(results['errors'])} errors",
        "results": results,
    })


#route to copy several files, bytes included, into one category/folder
@files_bp.route('/copy-multiple', methods=['POST'])
@login_required
def copy_multiple():
    data = request.get_json(silent=True) or {}
    file_ids = batch_ids(data, 'file_ids')
    if file_ids is None:
        return jsonify({"error": "file_ids array is required"}), 400

    category, folder, error = batch_target(data)
    if error:
        return jsonify({"error": error}), 400

    results = {'copied': [], 'errors': []}
    for file_id in file_ids:
        source = batch_file(file_id)
        if source is None:
            results['errors'].append({'file_id': file_id, 'error': "File not found"})
            continue

        try:
            new_path = copy_stored_file(source.file_path)
        except OSError as e:
            current_app.logger.error("Copy of file %s failed: %s", source.id, e)
            results['errors'].append({'file_id': source.id, 'error': "Failed to copy file"})
            continue

        name = f"Copy of {source.name}"
        item = FileItem(
            name=name,
            original_name=name,
            file_type=source.file_type,
            file_size=source.file_size,
            mime_type=source.mime_type,
            file_path=new_path,
            category_id=category.id,
            folder_id=folder.id if folder else None,
            created_by=current_user.id,
        )
        db.session.add(item)
        db.session.commit()

        log_activity(current_user.id, ActivityType.COPY_FILE, TargetType.FILE, item.id, item.name,
                     stored_path(item), item.file_size, stored_path(source), stored_path(item),
                     request=request)
        results['copied'].append({'file_id': item.id, 'source_id': source.id, 'name': item.name})

    return jsonify({
        "message": f"Copy completed: {len(results['copied'])} copied, {len(results['errors'])} errors",
        "results": results,
    })


#route to delete several files, rows first then bytes
@files_bp.route('/bulk/delete', methods=['DELETE'])
@login_required
def bulk_delete():
    data = request.get_json(silent=True) or {}
    ids = batch_ids(data, 'ids')
    if ids is None:
        return jsonify({"error": "IDs array is required"}), 400

    results = {'deleted': [], 'errors': []}
    for file_id in ids:
        file = batch_file(file_id)
        if file is None:
            results['errors'].append({'id': file_id, 'error': "File not found"})
            continue

        name, path, size, file_path = file.name, stored_path(file), file.file_size, file.file_path
        deleted_id = file.id
        db.session.delete(file)
        db.session.commit()
        remove_stored_file(file_path)

        log_file_delete(current_user.id, deleted_id, name, path, size, request=request)
        results['deleted'].append({'type': 'file', 'id': deleted_id, 'name': name})

    return jsonify({
        "message": f"Bulk delete completed: {len(results['deleted'])} deleted, {len(results['errors'])} errors",
        "results": results,
    })


# === SINGLE FILE ===
@files_bp.route('/<int:file_id>', methods=['GET'])
@login_required
def get_file(file_id):
    file = db.get_or_404(FileItem, file_id, description="File not found")
    return jsonify({"message": "File retrieved successfully", "file": file.to_dict()})


#route to rename or move a file
@files_bp.route('/<int:file_id>', methods=['PUT'])
@login_required
def update_file(file_id):
    file = db.get_or_404(FileItem, file_id, description="File not found")
    data = request.get_json(silent=True) or {}

    old_name = file.name
    old_path = stored_path(file)
    old_folder_id = file.folder_id

    if 'name' in data:
        name = str(data.get('name') or '').strip()
        if not name:
            return jsonify({"error": "File name cannot be empty"}), 400
        file.name = name

    folder = file.folder
    if 'folder_id' in data:
        _, folder_id = parse_nullable_id(data.get('folder_id'), 'folder_id')
        folder, error = resolve_folder(folder_id, file.category_id)
        if error:
            return jsonify({"error": error}), 400
        file.folder = folder

    if 'is_starred' in data:
        file.is_starred = parse_bool(data['is_starred'], default=file.is_starred)
    if 'is_active' in data:
        file.is_active = parse_bool(data['is_active'], default=file.is_active)

    renamed = file.name != old_name
    moved = (folder.id if folder else None) != old_folder_id

    file.updated_by = current_user.id
    db.session.commit()

    if renamed:
        log_file_rename(current_user.id, file.id, old_name, file.name, stored_path(file), request=request)
    if moved:
        log_file_move(current_user.id, file.id, file.name, old_path, stored_path(file), request=request)
    if not renamed and not moved:
        log_activity(current_user.id, ActivityType.UPDATE_FILE, TargetType.FILE,
                     file.id, file.name, stored_path(file), request=request)

    return jsonify({"message": "File updated successfully", "file": file.to_dict()})


#route to star/unstar a file, toggles when is_starred is not given
@files_bp.route('/<int:file_id>/star', methods=['PATCH'])
@login_required
def toggle_star(file_id):
    file = db.get_or_404(FileItem, file_id, description="File not found")
    data = request.get_json(silent=True) or {}

    file.is_starred = parse_bool(data.get('is_starred'), default=not file.is_starred)
    file.updated_by = current_user.id
    db.session.commit()

    activity = ActivityType.STAR_FILE if file.is_starred else ActivityType.UNSTAR_FILE
    log_activity(current_user.id, activity, TargetType.FILE, file.id, file.name, request=request)

    return jsonify({
        "message": f"File {'starred' if file.is_starred else 'unstarred'} successfully",
        "is_starred": file.is_starred,
    })


#route to delete a file, row first then bytes
@files_bp.route('/<int:file_id>', methods=['DELETE'])
@login_required
def delete_file(file_id):
    file = db.get_or_404(FileItem, file_id, description="File not found")
    name, path, size, file_path = file.name, stored_path(file), file.file_size, file.file_path
    db.session.delete(file)
    db.session.commit()
    remove_stored_file(file_path)

    log_file_delete(current_user.id, file_id, name, path, size, request=request)
    return jsonify({"message": "File deleted successfully", "id": file_id})


#route to download a file, preview=true serves it inline without counting
@files_bp.route('/<int:file_id>/download', methods=['GET'])
def download_file(file_id):
    file = db.session.get(FileItem, file_id)
    if file is None or not file.is_active:
        return jsonify({"error": "File not found"}), 404

    if not is_inside_upload_folder(file.file_path):
        return jsonify({"error": "Invalid file path"}), 400
    if not os.path.exists(file.file_path):
        return jsonify({"error": "Physical file not found"}), 404

    preview = parse_bool(request.args.get('preview'), default=False)
    user_id = parse_int(request.args.get('user_id'), 'user_id')
    if not preview:
        file.download_count = (file.download_count or 0) + 1
        file.last_accessed = datetime.utcnow()
        db.session.commit()

        if user_id and db.session.get(User, user_id) is not None:
            log_activity(user_id, ActivityType.DOWNLOAD_FILE, TargetType.FILE, file.id, file.name,
                         stored_path(file), file.file_size, request=request)

    return send_file(
        file.file_path,
        mimetype=file.mime_type or None,
        as_attachment=not preview,
        download_name=file.original_name,
    )


@files_bp.route('/stats/<int:category_id>', methods=['GET'])
@login_required
def file_stats(category_id):
    db.get_or_404(Category, category_id, description="Category not found")
    base = FileItem.query.filter(FileItem.category_id == category_id)

    total_files = base.count()
    total_size = base.with_entities(func.coalesce(func.sum(FileItem.file_size), 0)).scalar()
    total_downloads = base.with_entities(func.coalesce(func.sum(FileItem.download_count), 0)).scalar()

    by_type = (
        db.session.query(
            FileItem.file_type,
            func.count(FileItem.id),
            func.coalesce(func.sum(FileItem.file_size), 0),
        )
        .filter(FileItem.category_id == category_id)
        .group_by(FileItem.file_type)
        .order_by(func.count(FileItem.id).desc())
        .all()
    )

    return jsonify({
        "message": "File statistics retrieved successfully",
        "stats": {
            "total_files": total_files,
            "total_size": format_bytes(int(total_size)),
            "starred_files": base.filter(FileItem.is_starred.is_(True)).count(),
            "active_files": base.filter(FileItem.is_active.is_(True)).count(),
            "total_downloads": int(total_downloads),
            "file_types": [
                {'type': file_type, 'count': count, 'size': format_bytes(int(size))}
                for file_type, count, size in by_type if file_type
            ],
        },
    })
