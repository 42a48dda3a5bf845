# intrafiles/routes/activity.py
from flask import Blueprint, jsonify, request
from flask_login import login_required

from intrafiles.models import ActivityType
from intrafiles.utils.activity import get_activity_stats, get_activity_summary, get_recent_activities
from intrafiles.utils.params import parse_int

activity_bp = Blueprint('activity', __name__)

MAX_RECENT = 500


@activity_bp.route('/recent', methods=['GET'])
@login_required
def recent():
    limit = max(1, min(parse_int(request.args.get('limit'), 'limit', default=50), MAX_RECENT))
    user_id = parse_int(request.args.get('user_id'), 'user_id')

    activity_type = request.args.get('activity_type') or None
    if activity_type and activity_type not in {t.value for t in ActivityType}:
        return jsonify({"error": f"Unknown activity_type: {activity_type}"}), 400

    activities = get_recent_activities(limit=limit, user_id=user_id, activity_type=activity_type)
    return jsonify({"activities": activities, "total": len(activities)})


@activity_bp.route('/stats', methods=['GET'])
@login_required
def stats():
    days = parse_int(request.args.get('days'), 'days', default=30)
    return jsonify({"days": days, "stats": get_activity_stats(days)})


@activity_bp.route('/summary', methods=['GET'])
@login_required
def summary():
    days = parse_int(request.args.get('days'), 'days', default=30)
    return jsonify({"days": days, "summary": get_activity_summary(days)})
