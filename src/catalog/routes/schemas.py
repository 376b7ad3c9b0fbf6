from marshmallow import Schema, fields, validate

from catalog.core.config import config
from catalog.services.r2_storage_service import FOLDER_PATTERN

_PRODUCT_TYPES = ["physical", "digital"]
_PUBLISH_STATES = ["active", "draft", "archived"]


class ProductListQuerySchema(Schema):
    page = fields.Int(load_default=1, validate=validate.Range(min=1))
    page_size = fields.Int(
        load_default=config.api.default_page_size,
        validate=validate.Range(min=1, max=config.api.max_page_size),
    )
    q = fields.Str(load_default=None, validate=validate.Length(max=100))
    type = fields.Str(load_default=None, validate=validate.OneOf(_PRODUCT_TYPES))
    publish = fields.Str(load_default=None, validate=validate.OneOf(_PUBLISH_STATES))
    category = fields.Str(load_default=None)


class ListQuerySchema(Schema):
    limit = fields.Int(load_default=100, validate=validate.Range(min=1, max=500))
    q = fields.Str(load_default="", validate=validate.Length(max=100))


class InventoryQuerySchema(Schema):
    limit = fields.Int(load_default=100, validate=validate.Range(min=1, max=500))
    product_id = fields.Int(load_default=None, validate=validate.Range(min=1))


class PresignUploadSchema(Schema):
    file_name = fields.Str(required=True, validate=validate.Length(min=1, max=255))
    content_type = fields.Str(load_default="image/jpeg")
    folder = fields.Str(load_default=None, validate=validate.Regexp(FOLDER_PATTERN))


class PresignDownloadSchema(Schema):
    key = fields.Str(required=True, validate=validate.Length(min=1))
    expires_in = fields.Int(load_default=None, validate=validate.Range(min=60, max=604800))


class ObjectListQuerySchema(Schema):
    prefix = fields.Str(load_default="")
    max_keys = fields.Int(load_default=1000, validate=validate.Range(min=1, max=1000))


class DeleteObjectSchema(Schema):
    url = fields.Str(required=True, validate=validate.Length(min=1))


class ProvisionDatabaseSchema(Schema):
    email = fields.Email(required=True)
