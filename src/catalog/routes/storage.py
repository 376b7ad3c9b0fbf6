import logging

from flask import Blueprint

from catalog.core.dependencies import get_container
from catalog.routes.schemas import (
    DeleteObjectSchema, ObjectListQuerySchema, PresignDownloadSchema, PresignUploadSchema,
)
from catalog.routes.utils import get_current_user_id, load_args, load_json, success_response
from catalog.services.r2_storage_service import R2StorageService

logger = logging.getLogger(__name__)

storage_bp = Blueprint("storage", __name__)

_upload_schema = PresignUploadSchema()
_download_schema = PresignDownloadSchema()
_list_schema = ObjectListQuerySchema()
_delete_schema = DeleteObjectSchema()


def _storage() -> R2StorageService:
    return get_container().get(R2StorageService)


@storage_bp.route("/uploads", methods=["POST"])
def create_upload():
    """Presigned PUT URL for a new media object, plus its public URL."""
    get_current_user_id()
    body = load_json(_upload_schema)
    upload = _storage().create_upload(body["file_name"], body["content_type"], body["folder"])
    return success_response(upload, status=201)


@storage_bp.route("/downloads", methods=["GET"])
def create_download():
    get_current_user_id()
    args = load_args(_download_schema)
    url = _storage().get_presigned_download_url(args["key"], args["expires_in"])
    return success_response({"key": args["key"], "presigned_url": url})


@storage_bp.route("/objects", methods=["GET"])
def list_objects():
    get_current_user_id()
    args = load_args(_list_schema)
    objects = _storage().list_objects(args["prefix"], args["max_keys"])
    return success_response({"items": objects, "count": len(objects)})


@storage_bp.route("/objects", methods=["DELETE"])
def delete_object():
    get_current_user_id()
    body = load_json(_delete_schema)
    deleted = _storage().delete_object(body["url"])
    return success_response({"deleted": deleted}, None if deleted else "Object could not be deleted.")
