# intrafiles/utils/files.py
import os
import shutil
import uuid

from flask import current_app
from werkzeug.utils import secure_filename


# === DYNAMIC CONFIG ===
def get_upload_folder():
    return current_app.config['UPLOAD_FOLDER']

def get_allowed_extensions():
    return current_app.config['ALLOWED_EXTENSIONS']

def get_max_file_size():
    return current_app.config.get('MAX_FILE_SIZE', 50 * 1024 * 1024)

def file_extension(filename):
    return filename.rsplit('.', 1)[1].lower() if filename and '.' in filename else ''

def allowed_file(filename, allowed_extensions):
    return '.' in filename and file_extension(filename) in allowed_extensions


def format_bytes(bytes_num):
    if not bytes_num:
        return "0 Bytes"
    value = float(bytes_num)
    for unit in ['Bytes', 'KB', 'MB', 'GB']:
        if value < 1024:
            return f"{round(value, 2):g} {unit}"
        value /= 1024
    return f"{round(value, 2):g} TB"


class UploadRejected(Exception):
    """An uploaded file failed the name, extension or size checks."""


def save_upload(storage):
    """
    Writes a werkzeug FileStorage under UPLOAD_FOLDER with a unique name.
    Returns (original_name, file_path, file_size, file_type).
    """
    if storage is None or not storage.filename:
        raise UploadRejected("No file selected.")

    original_name = secure_filename(storage.filename)
    if not original_name or not allowed_file(original_name, get_allowed_extensions()):
        raise UploadRejected(f"File type not allowed: {storage.filename}")

    ext = os.path.splitext(original_name)[1]
    upload_folder = get_upload_folder()
    os.makedirs(upload_folder, exist_ok=True)
    filepath = os.path.join(upload_folder, f"{uuid.uuid4().hex}{ext}")
    storage.save(filepath)

    size = os.path.getsize(filepath)
    if size > get_max_file_size():
        remove_stored_file(filepath)
        raise UploadRejected(f"File too large: {original_name} (max {format_bytes(get_max_file_size())}).")

    return original_name, filepath, size, file_extension(original_name)


def is_inside_upload_folder(file_path):
    root = os.path.realpath(get_upload_folder())
    target = os.path.realpath(file_path)
    return os.path.commonpath([root, target]) == root


def remove_stored_file(file_path):
    """Removes the bytes of an upload; a missing file is not an error."""
    if not file_path or not is_inside_upload_folder(file_path):
        return False
    try:
        os.remove(file_path)
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        current_app.logger.error("Could not remove %s: %s", file_path, e)
        return False


def copy_stored_file(file_path):
    """Duplicates the bytes of an upload under a new unique name. Returns the new path."""
    if not file_path or not is_inside_upload_folder(file_path):
        raise FileNotFoundError(f"Not a stored upload: {file_path}")
    ext = os.path.splitext(file_path)[1]
    new_path = os.path.join(get_upload_folder(), f"{uuid.uuid4().hex}{ext}")
    shutil.copyfile(file_path, new_path)
    return new_path


def get_folder_breadcrumb(folder):
    breadcrumb = []
    current = folder
    while current is not None and current not in breadcrumb:
        breadcrumb.append(current)
        current = current.parent
    return breadcrumb[::-1]
