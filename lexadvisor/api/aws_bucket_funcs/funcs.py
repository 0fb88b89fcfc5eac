"""
S3 Utilities - Client Init • Upload • Delete • Presigned Download
=================================================================

Purpose
-------
Stores the original files of uploaded legal documents in the document
bucket (``settings.BUCKET_NAME``):
- Initialize an S3 client with Signature V4
- Upload an object with its content type
- Delete an object
- Generate a presigned URL for downloads

`DocumentStorage` puts the bucket policies (``storage.objects`` in
:mod:`lexadvisor.database.policies`) in front of those helpers: any signed-in
user may read, admins and legal analysts may upload, only admins may delete.

Configuration (from `lexadvisor.database.config.config.settings`)
-----------------------------------------------------------------
- AWS_ACCESS_KEY : Access key ID
- AWS_SECRET_KEY : Secret access key
- REGION         : AWS region (e.g., "eu-central-1")
- BUCKET_NAME    : Target S3 bucket

Security Notes
--------------
Presigned URLs grant temporary access; choose sensible expirations.
"""

import logging
import re
import uuid

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from lexadvisor.api.errors import StorageError
from lexadvisor.database.config.config import settings
from lexadvisor.database.policies import DELETE, INSERT, SELECT, STORAGE_OBJECTS, Caller, PolicyEvaluator

logger = logging.getLogger(__name__)

DEFAULT_MIME = "application/octet-stream"


def get_client():
    """
    Initialize and return a low-level S3 client configured for Signature V4.

    Returns
    -------
    botocore.client.S3
        An S3 client ready for object operations.
    """
    return boto3.client(
        "s3",
        aws_access_key_id=settings.AWS_ACCESS_KEY,
        aws_secret_access_key=settings.AWS_SECRET_KEY,
        region_name=settings.REGION,
        config=Config(signature_version="s3v4"),
    )


def upload(data: bytes, key: str, s3_client, content_type: str = DEFAULT_MIME, filename: str | None = None):
    """
    Upload raw bytes to the bucket.

    Parameters
    ----------
    data : bytes
        File content.
    key : str
        Object key.
    s3_client : botocore.client.S3
        Client returned by `get_client()`.
    content_type : str
        MIME type stored with the object.
    filename : str | None
        Original filename, used for ``ContentDisposition``.
    """
    extra = {"ContentType": content_type or DEFAULT_MIME}
    if filename:
        extra["ContentDisposition"] = f'attachment; filename="{filename}"'
    s3_client.put_object(Bucket=settings.BUCKET_NAME, Key=key, Body=data, **extra)


def delete(key: str, s3_client):
    """Delete one object from the bucket."""
    s3_client.delete_object(Bucket=settings.BUCKET_NAME, Key=key)


def download(key: str, s3_client, expires: int = 3600):
    """
    Generate a presigned URL for downloading an object.

    Returns
    -------
    str
        A presigned URL that allows temporary GET access.
    """
    return s3_client.generate_presigned_url(
        "get_object",
        Params={"Bucket": settings.BUCKET_NAME, "Key": key},
        ExpiresIn=expires,
    )


def object_key(user_id, filename: str) -> str:
    """Key under the uploader's prefix: ``<user_id>/<uuid>.<ext>``."""
    match = re.search(r"\.([A-Za-z0-9]{1,10})$", filename or "")
    suffix = f".{match.group(1).lower()}" if match else ""
    return f"{user_id}/{uuid.uuid4().hex}{suffix}"


class DocumentStorage:
    """
    Policy-checked access to the document bucket.

    Parameters
    ----------
    s3_client : botocore.client.S3, optional
        Client to use; created lazily with `get_client()` when omitted.
    evaluator : PolicyEvaluator, optional
        Evaluator consulted for the ``storage.objects`` policies.
    """

    def __init__(self, s3_client=None, evaluator: PolicyEvaluator | None = None):
        self._s3_client = s3_client
        self.evaluator = evaluator or PolicyEvaluator()

    @property
    def client(self):
        if self._s3_client is None:
            self._s3_client = get_client()
        return self._s3_client

    def _require(self, caller: Caller, operation: str) -> None:
        if not self.evaluator.allows(caller, STORAGE_OBJECTS, operation):
            raise StorageError(f'new row violates row-level security policy for table "{STORAGE_OBJECTS}"')

    def store(self, caller: Caller, filename: str, data: bytes, content_type: str | None = None) -> str:
        """
        Upload a document file and return its object key.

        Raises
        ------
        StorageError
            If the caller may not upload or S3 rejects the request.
        """
        self._require(caller, INSERT)
        key = object_key(caller.user_id, filename)
        try:
            upload(data, key, self.client, content_type=content_type or DEFAULT_MIME, filename=filename)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error in DocumentStorage.store. Error: {e}")
            raise StorageError(str(e)) from e
        logger.info(f"Stored document file {key} ({len(data)} bytes)")
        return key

    def remove(self, caller: Caller, key: str) -> None:
        self._require(caller, DELETE)
        try:
            delete(key, self.client)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error in DocumentStorage.remove. Error: {e}")
            raise StorageError(str(e)) from e

    def signed_url(self, caller: Caller, key: str, expires: int = 3600) -> str:
        self._require(caller, SELECT)
        try:
            return download(key, self.client, expires=expires)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error in DocumentStorage.signed_url. Error: {e}")
            raise StorageError(str(e)) from e
