# intrafiles/utils/activity.py
"""
Audit trail for file, folder and category mutations.

Writing is best effort: a failed insert is rolled back and reported on this
module's logger, the caller only sees None. The primary operation is always
committed before its activity row is written.
"""
import logging
from datetime import datetime, timedelta

from sqlalchemy import func

from intrafiles import db
from intrafiles.models.activity import ActivityLog, ActivityType, TargetType

logger = logging.getLogger(__name__)


def _client_info(request):
    if request is None:
        return None, None
    forwarded = request.headers.get('X-Forwarded-For')
    ip_address = forwarded.split(',')[0].strip() if forwarded else request.remote_addr
    return ip_address, request.headers.get('User-Agent')


def log_activity(user_id, activity_type, target_type, target_id, target_name,
                 target_path=None, file_size=None, old_value=None, new_value=None, request=None):
    """Inserts one activity row. Returns its id, or None if anything failed."""
    try:
        ip_address, user_agent = _client_info(request)
        act = ActivityLog(
            user_id=user_id,
            activity_type=ActivityType(activity_type).value,
            target_type=TargetType(target_type).value,
            target_id=target_id,
            target_name=target_name,
            target_path=target_path,
            file_size=file_size,
            old_value=old_value,
            new_value=new_value,
            ip_address=ip_address,
            user_agent=user_agent[:500] if user_agent else None,
        )
        db.session.add(act)
        db.session.commit()
        logger.info("Activity logged: %s - %s (ID: %s)", act.activity_type, target_name, act.id)
        return act.id
    except Exception:
        logger.exception("Error logging activity %s on %s %s", activity_type, target_type, target_id)
        try:
            db.session.rollback()
        except Exception:
            logger.exception("Rollback after failed activity insert also failed")
        return None


# === FIXED PROJECTIONS ===
def log_file_upload(user_id, file_id, file_name, file_path, file_size, request=None):
    return log_activity(user_id, ActivityType.UPLOAD_FILE, TargetType.FILE, file_id, file_name,
                        file_path, file_size, request=request)

def log_file_delete(user_id, file_id, file_name, file_path, file_size, request=None):
    return log_activity(user_id, ActivityType.DELETE_FILE, TargetType.FILE, file_id, file_name,
                        file_path, file_size, request=request)

def log_folder_create(user_id, folder_id, folder_name, request=None):
    return log_activity(user_id, ActivityType.CREATE_FOLDER, TargetType.FOLDER, folder_id, folder_name,
                        request=request)

def log_folder_delete(user_id, folder_id, folder_name, request=None):
    return log_activity(user_id, ActivityType.DELETE_FOLDER, TargetType.FOLDER, folder_id, folder_name,
                        request=request)

def log_file_rename(user_id, file_id, old_name, new_name, file_path, request=None):
    return log_activity(user_id, ActivityType.RENAME_FILE, TargetType.FILE, file_id, new_name,
                        file_path, None, old_name, new_name, request=request)

def log_folder_rename(user_id, folder_id, old_name, new_name, request=None):
    return log_activity(user_id, ActivityType.RENAME_FOLDER, TargetType.FOLDER, folder_id, new_name,
                        None, None, old_name, new_name, request=request)

def log_file_move(user_id, file_id, file_name, old_path, new_path, request=None):
    return log_activity(user_id, ActivityType.MOVE_FILE, TargetType.FILE, file_id, file_name,
                        new_path, None, old_path, new_path, request=request)

def log_folder_move(user_id, folder_id, folder_name, old_path, new_path, request=None):
    return log_activity(user_id, ActivityType.MOVE_FOLDER, TargetType.FOLDER, folder_id, folder_name,
                        new_path, None, old_path, new_path, request=request)


# === READ SIDE ===
def get_recent_activities(limit=50, user_id=None, activity_type=None):
    """Newest first, optionally filtered by user and/or activity type."""
    try:
        query = ActivityLog.query
        if user_id:
            query = query.filter(ActivityLog.user_id == user_id)
        if activity_type:
            query = query.filter(ActivityLog.activity_type == ActivityType(activity_type).value)
        rows = query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc()).limit(limit).all()
        return [row.to_dict() for row in rows]
    except Exception:
        logger.exception("Error fetching activities")
        return []


def get_activity_stats(days=30):
    """Counts per (activity_type, day) over the last `days` days."""
    try:
        since = datetime.utcnow() - timedelta(days=days)
        activity_date = func.date(ActivityLog.created_at)
        count = func.count(ActivityLog.id)
        rows = (
            db.session.query(ActivityLog.activity_type, count, activity_date)
            .filter(ActivityLog.created_at >= since)
            .group_by(ActivityLog.activity_type, activity_date)
            .order_by(activity_date.desc(), count.desc())
            .all()
        )
        return [
            {'activity_type': activity_type, 'count': n, 'activity_date': str(day)}
            for activity_type, n, day in rows
        ]
    except Exception:
        logger.exception("Error fetching activity stats")
        return []


def get_activity_summary(days=30):
    """Counts per activity_type over the last `days` days, largest first."""
    try:
        since = datetime.utcnow() - timedelta(days=days)
        count = func.count(ActivityLog.id)
        rows = (
            db.session.query(ActivityLog.activity_type, count)
            .filter(ActivityLog.created_at >= since)
            .group_by(ActivityLog.activity_type)
            .order_by(count.desc())
            .all()
        )
        return [{'activity_type': activity_type, 'count': n} for activity_type, n in rows]
    except Exception:
        logger.exception("Error fetching activity summary")
        return []
