# intrafiles/routes/categories.py
from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from intrafiles import db
from intrafiles.models import ActivityType, Category, FileItem, Folder, TargetType
from intrafiles.utils.activity import log_activity
from intrafiles.utils.params import parse_bool, parse_int

categories_bp = Blueprint('categories', __name__)

EDITABLE_FIELDS = ('description', 'color', 'icon')


#route to list categories, active ones unless is_active says otherwise
@categories_bp.route('', methods=['GET'])
@login_required
def list_categories():
    query = Category.query
    is_active = parse_bool(request.args.get('is_active'), default=True)
    query = query.filter(Category.is_active == is_active)

    created_by = parse_int(request.args.get('created_by'), 'created_by')
    if created_by:
        query = query.filter(Category.created_by == created_by)

    categories = query.order_by(Category.name.asc()).all()
    return jsonify({
        "categories": [c.to_dict() for c in categories],
        "total": len(categories),
    })


@categories_bp.route('', methods=['POST'])
@login_required
def create_category():
    data = request.get_json(silent=True) or {}
    name = str(data.get('name') or '').strip()
    if not name:
        return jsonify({"error": "Category name is required"}), 400

    category = Category(name=name, created_by=current_user.id)
    for field in EDITABLE_FIELDS:
        if data.get(field):
            setattr(category, field, data[field])

    db.session.add(category)
    db.session.commit()

    log_activity(current_user.id, ActivityType.CREATE_CATEGORY, TargetType.CATEGORY,
                 category.id, category.name, request=request)
    return jsonify({"message": "Category created successfully", "category": category.to_dict()}), 201


@categories_bp.route('/<int:category_id>', methods=['GET'])
@login_required
def get_category(category_id):
    category = db.get_or_404(Category, category_id, description="Category not found")
    return jsonify({"category": category.to_dict()})


@categories_bp.route('/<int:category_id>', methods=['PUT'])
@login_required
def update_category(category_id):
    category = db.get_or_404(Category, category_id, description="Category not found")
    data = request.get_json(silent=True) or {}

    old_name = category.name
    if 'name' in data:
        name = str(data.get('name') or '').strip()
        if not name:
            return jsonify({"error": "Category name cannot be empty"}), 400
        category.name = name

    for field in EDITABLE_FIELDS:
        if field in data:
            setattr(category, field, data[field])
    if 'is_active' in data:
        category.is_active = parse_bool(data['is_active'], default=category.is_active)

    category.updated_by = current_user.id
    db.session.commit()

    log_activity(current_user.id, ActivityType.UPDATE_CATEGORY, TargetType.CATEGORY,
                 category.id, category.name, old_value=old_name, new_value=category.name,
                 request=request)
    return jsonify({"message": "Category updated successfully", "category": category.to_dict()})


#route to delete a category (logical: is_active goes to False)
@categories_bp.route('/<int:category_id>', methods=['DELETE'])
@login_required
def delete_category(category_id):
    category = db.get_or_404(Category, category_id, description="Category not found")

    active_folders = Folder.query.filter_by(category_id=category.id, is_active=True).count()
    active_files = FileItem.query.filter_by(category_id=category.id, is_active=True).count()
    if active_folders or active_files:
        return jsonify({
            "error": "Cannot delete a category that still contains folders or files",
            "folders": active_folders,
            "files": active_files,
        }), 400

    category.is_active = False
    category.updated_by = current_user.id
    db.session.commit()

    log_activity(current_user.id, ActivityType.DELETE_CATEGORY, TargetType.CATEGORY,
                 category.id, category.name, request=request)
    return jsonify({"message": "Category deleted successfully", "id": category.id})
