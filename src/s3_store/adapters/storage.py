"""
S3 storage adapter: stores a host application's files in a bucket.

Object stores have no directories and no rename. Folders are key prefixes,
a move is a copy followed by a delete, and access is controlled per object
with an ACL chosen from the configured expiration.
"""

import logging
import mimetypes
from typing import TYPE_CHECKING, List, Optional
from urllib.parse import quote

from botocore.exceptions import BotoCoreError, ClientError

from s3_store.config.storage import StorageConfiguration
from s3_store.errors import ConfigurationError, StorageReadError, StorageWriteError
from s3_store.results import StoreResult
from s3_store.s3.client import create_s3_client
from s3_store.utils.decorators import log_execution_time

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)

PATH_SCHEME = "s3"
MISSING_OBJECT_CODES = ("404", "NoSuchKey", "NotFound")
DELETE_BATCH_SIZE = 1000
CHECKSUM_FIELDS = ("ChecksumCRC32", "ChecksumCRC32C", "ChecksumCRC64NVME", "ChecksumSHA1", "ChecksumSHA256")


def _error_message(e: Exception) -> str:
    if isinstance(e, ClientError):
        error = e.response.get("Error", {})
        return f"{error.get('Code', 'Unknown')}: {error.get('Message', str(e))}"
    return str(e)


def _full_object_value(head: dict, field: str) -> Optional[str]:
    # Multipart values end in "-<parts>" and do not describe the whole content.
    value = head.get(field)
    if value and "-" not in str(value):
        return value
    return None


def _etag_is_md5(head: dict) -> bool:
    return head.get("ServerSideEncryption") != "aws:kms" and _full_object_value(head, "ETag") is not None


class S3Store:
    """Cloud storage adapter for Amazon S3, using boto3.

    The configuration is fixed for the lifetime of the instance; to apply new
    settings build a new store.
    """

    def __init__(
        self,
        config: StorageConfiguration,
        client: Optional["S3Client"] = None,
        endpoint_url: Optional[str] = None,
        verify_moves: bool = False,
    ):
        if not config.access_key_id or not config.secret_access_key:
            raise ConfigurationError(
                "You must specify your AWS access key and secret key to use the AWS S3 storage adapter."
            )
        if not config.bucket:
            raise ConfigurationError("You must specify an S3 bucket name to use the AWS S3 storage adapter.")

        self.config = config
        self.bucket = config.bucket
        self.verify_moves = verify_moves
        self.client = client or create_s3_client(config, endpoint_url=endpoint_url)

    @property
    def expiration(self) -> int:
        return self.config.expiration_minutes

    def storage_path(self, key: str = "") -> str:
        """Path of a key in the ``s3://<bucket>/`` scheme owned by this store."""
        return f"{PATH_SCHEME}://{self.bucket}/{key}"

    def _key(self, path: str) -> str:
        """Resolve a key or a ``s3://<bucket>/`` path to a bucket key."""
        path = path or ""
        prefix = self.storage_path()
        if path.startswith(prefix):
            path = path[len(prefix):]
        return path.lstrip("/")

    # Checks

    def can_store(self) -> bool:
        """Check if the configured bucket exists and is reachable."""
        try:
            self.client.head_bucket(Bucket=self.bucket)
            return True
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"Bucket '{self.bucket}' is not reachable: {_error_message(e)}")
            return False

    def list_buckets(self) -> StoreResult[List[str]]:
        """Names of the buckets visible to the credentials."""
        try:
            response = self.client.list_buckets()
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Unable to list buckets: {_error_message(e)}")
            return StoreResult.failure(StorageReadError(_error_message(e)))
        return StoreResult.success([bucket["Name"] for bucket in response.get("Buckets", [])])

    def determine_bucket_region(self) -> StoreResult[str]:
        """Region that actually hosts the configured bucket."""
        try:
            response = self.client.get_bucket_location(Bucket=self.bucket)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Unable to determine region of bucket '{self.bucket}': {_error_message(e)}")
            return StoreResult.failure(StorageReadError(_error_message(e)))

        # Legacy S3 values: no constraint is us-east-1, "EU" is eu-west-1
        location = response.get("LocationConstraint") or "us-east-1"
        if location == "EU":
            location = "eu-west-1"
        return StoreResult.success(location)

    def exists(self, path: str) -> bool:
        """Check if an object exists at the key."""
        key = self._key(path)
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in MISSING_OBJECT_CODES:
                return False
            raise StorageReadError(
                f'Unable to check "{key}" on bucket "{self.bucket}". {_error_message(e)}'
            ) from e
        except BotoCoreError as e:
            raise StorageReadError(
                f'Unable to check "{key}" on bucket "{self.bucket}". {_error_message(e)}'
            ) from e

    # Writes

    @log_execution_time
    def put(self, source: str, path: str) -> None:
        """
        Upload a local file to the bucket.

        :param source: Local path to the file to store.
        :param path: Key (or storage path) to store at.
        """
        key = self._key(path)
        extra_args = {"ACL": self.config.acl}
        content_type = mimetypes.guess_type(source)[0]
        if content_type:
            extra_args["ContentType"] = content_type

        try:
            with open(source, "rb") as file_data:
                self.client.put_object(Bucket=self.bucket, Key=key, Body=file_data, **extra_args)
        except (ClientError, BotoCoreError, OSError) as e:
            raise StorageWriteError(
                f'Failed to copy "{source}" to "{key}" on bucket "{self.bucket}". {_error_message(e)}',
                source=source,
                destination=key,
                bucket=self.bucket,
            ) from e

        logger.info(f"Stored '{source}' as '{key}' on bucket '{self.bucket}'.")

    @log_execution_time
    def move(self, source_path: str, dest_path: str) -> None:
        """
        Move an object by copying it to the destination and deleting the source.

        This is not atomic. If the process stops between the copy and the
        delete, both objects exist; nothing is rolled back.
        """
        source = self._key(source_path)
        dest = self._key(dest_path)

        try:
            self.client.copy_object(
                Bucket=self.bucket,
                Key=dest,
                CopySource={"Bucket": self.bucket, "Key": source},
                ACL=self.config.acl,
            )
            if self.verify_moves:
                self._verify_copy(source, dest)
            self.client.delete_object(Bucket=self.bucket, Key=source)
        except (ClientError, BotoCoreError) as e:
            raise StorageWriteError(
                f'Failed to copy "{source}" to "{dest}" on bucket "{self.bucket}". {_error_message(e)}',
                source=source,
                destination=dest,
                bucket=self.bucket,
            ) from e

        logger.info(f"Moved '{source}' to '{dest}'.")

    def _verify_copy(self, source: str, dest: str) -> None:
        """
        Compare the copy with its source before the source is deleted.

        Sizes must always match. Checksums are compared when both objects
        carry the same algorithm. ETags are only a content MD5 for single-part,
        non-KMS objects, so they are skipped for multipart or SSE-KMS sources.
        """
        source_head = self.client.head_object(Bucket=self.bucket, Key=source, ChecksumMode="ENABLED")
        dest_head = self.client.head_object(Bucket=self.bucket, Key=dest, ChecksumMode="ENABLED")

        fields = ["ContentLength"]
        fields += [
            f for f in CHECKSUM_FIELDS
            if _full_object_value(source_head, f) and _full_object_value(dest_head, f)
        ]
        if _etag_is_md5(source_head) and _etag_is_md5(dest_head):
            fields.append("ETag")

        for field in fields:
            if source_head.get(field) != dest_head.get(field):
                raise StorageWriteError(
                    f'Copy of "{source}" to "{dest}" on bucket "{self.bucket}" does not match the source '
                    f"({field}: {source_head.get(field)} != {dest_head.get(field)}); source kept.",
                    source=source,
                    destination=dest,
                    bucket=self.bucket,
                )

    @log_execution_time
    def delete(self, path: str) -> None:
        """Remove a stored object. Deleting a missing object only logs a warning."""
        key = self._key(path)
        try:
            if not self.exists(key):
                logger.warning(f"Tried to delete missing object '{key}'.")
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError, StorageReadError) as e:
            raise StorageWriteError(
                f"Unable to delete file. {_error_message(e)}",
                destination=key,
                bucket=self.bucket,
            ) from e

        logger.info(f"Removed object '{key}'.")

    @log_execution_time
    def delete_dir(self, prefix: str) -> int:
        """
        Delete every object under ``<prefix>/``.

        There are no directories in a bucket, so ``delete_dir("a")`` removes
        ``a/b`` and ``a/c`` but leaves ``ab`` alone. Returns the number of
        deleted objects.
        """
        prefix = self._key(prefix).strip("/")
        if not prefix:
            raise ValueError("Refusing to delete the whole bucket: prefix is empty")
        prefix = prefix + "/"

        deleted = 0
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                keys = [obj["Key"] for obj in page.get("Contents", [])]
                for start in range(0, len(keys), DELETE_BATCH_SIZE):
                    batch = keys[start:start + DELETE_BATCH_SIZE]
                    response = self.client.delete_objects(
                        Bucket=self.bucket,
                        Delete={"Objects": [{"Key": key} for key in batch], "Quiet": True},
                    )
                    errors = response.get("Errors", [])
                    if errors:
                        failed = ", ".join(f"{error['Key']} ({error.get('Code')})" for error in errors)
                        raise StorageWriteError(
                            f'Failed to delete "{prefix}" on bucket "{self.bucket}": {failed}',
                            destination=prefix,
                            bucket=self.bucket,
                        )
                    deleted += len(batch)
        except (ClientError, BotoCoreError) as e:
            raise StorageWriteError(
                f'Failed to delete "{prefix}" on bucket "{self.bucket}". {_error_message(e)}',
                destination=prefix,
                bucket=self.bucket,
            ) from e

        logger.info(f"Removed {deleted} object(s) under '{prefix}'.")
        return deleted

    # URLs

    def get_uri(self, path: str) -> str:
        """
        URI of a stored object.

        Public objects get a stable ``endpoint/bucket/key`` link; private ones
        get a presigned URL valid for the configured number of minutes from
        now. Presigned URLs are generated on every call.
        """
        key = self._key(path)
        if not self.expiration:
            endpoint = self.client.meta.endpoint_url.rstrip("/")
            return f"{endpoint}/{quote(self.bucket, safe='')}/{quote(key, safe='/~')}"

        return self.client.generate_presigned_url(
            ClientMethod="get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=self.expiration * 60,
        )
