from flask import Blueprint, abort, send_from_directory

from ..exceptions import StorageError
from ..services.storage_service import _storage

bp = Blueprint("media", __name__, url_prefix="/media")


@bp.get("/<bucket>/<path:object_path>")
def serve(bucket, object_path):
    """Public object URL; unknown buckets and traversal attempts are 404s."""
    try:
        target = _storage().object_path(bucket, object_path)
    except StorageError:
        abort(404)
    if not target.is_file():
        abort(404)
    return send_from_directory(target.parent, target.name)
