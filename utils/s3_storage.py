import logging
import os
import uuid

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app, url_for
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)


class ImageUploadError(Exception):
    pass


def allowed_image(filename):
    allowed = current_app.config['ALLOWED_IMAGE_EXTENSIONS']
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in allowed


def get_s3_client():
    config = current_app.config
    return boto3.client(
        's3',
        aws_access_key_id=config.get('AWS_ACCESS_KEY_ID'),
        aws_secret_access_key=config.get('AWS_SECRET_ACCESS_KEY'),
        region_name=config.get('AWS_S3_REGION')
    )


def upload_product_image(file_storage):
    """
    Store an uploaded product image and return its public URL.

    Uses the S3 bucket when ``AWS_S3_BUCKET`` is configured, otherwise the
    app's ``static/uploads/products`` folder.
    """
    if not file_storage or not file_storage.filename:
        raise ImageUploadError("No file selected.")
    if not allowed_image(file_storage.filename):
        raise ImageUploadError("Unsupported image type.")

    filename = f"{uuid.uuid4().hex[:12]}-{secure_filename(file_storage.filename)}"
    object_name = f"products/{filename}"
    config = current_app.config

    bucket = config.get('AWS_S3_BUCKET')
    if bucket:
        try:
            get_s3_client().upload_fileobj(
                file_storage.stream, bucket, object_name,
                ExtraArgs={'ContentType': file_storage.mimetype or 'application/octet-stream'}
            )
        except (BotoCoreError, ClientError) as exc:
            logger.exception("S3 upload failed for %s", object_name)
            raise ImageUploadError("Image upload failed.") from exc
        return f"https://{bucket}.s3.{config['AWS_S3_REGION']}.amazonaws.com/{object_name}"

    target_dir = os.path.join(config['UPLOAD_FOLDER'], 'products')
    os.makedirs(target_dir, exist_ok=True)
    file_storage.save(os.path.join(target_dir, filename))
    return url_for('static', filename=f"uploads/{object_name}")
