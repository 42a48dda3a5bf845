# intrafiles/routes/search.py
from flask import Blueprint, jsonify, request
from flask_login import login_required
from sqlalchemy import or_

from intrafiles.models import Category, FileItem, Folder
from intrafiles.utils.params import parse_int

search_bp = Blueprint('search', __name__)

RESULT_LIMIT = 50


#route for the category-scoped search: categories, their folders and their files
@search_bp.route('', methods=['GET'])
@login_required
def search():
    query = (request.args.get('q') or '').strip()
    if not query:
        return jsonify({"error": "Search query is required"}), 400

    like = f"%{query}%"
    category_id = parse_int(request.args.get('category_id'), 'category_id')

    categories = Category.query.filter(
        Category.is_active.is_(True),
        or_(Category.name.ilike(like), Category.description.ilike(like)),
    )
    folders = Folder.query.join(Category, Folder.category_id == Category.id).filter(
        Folder.is_active.is_(True),
        Category.is_active.is_(True),
        or_(Folder.name.ilike(like), Folder.description.ilike(like)),
    )
    files = FileItem.query.join(Category, FileItem.category_id == Category.id).filter(
        FileItem.is_active.is_(True),
        Category.is_active.is_(True),
        or_(FileItem.name.ilike(like), FileItem.original_name.ilike(like)),
    )

    if category_id:
        categories = categories.filter(Category.id == category_id)
        folders = folders.filter(Folder.category_id == category_id)
        files = files.filter(FileItem.category_id == category_id)

    results = {
        'categories': [c.to_dict() for c in categories.order_by(Category.name.asc()).limit(RESULT_LIMIT)],
        'folders': [f.to_dict() for f in folders.order_by(Folder.name.asc()).limit(RESULT_LIMIT)],
        'files': [f.to_dict() for f in files.order_by(FileItem.name.asc()).limit(RESULT_LIMIT)],
    }
    return jsonify({
        "query": query,
        "results": results,
        "totalResults": sum(len(bucket) for bucket in results.values()),
    })
