"""Create the S3 client a store talks to."""
import logging
from typing import TYPE_CHECKING, Optional

import boto3
from botocore.config import Config

from s3_store.config.storage import StorageConfiguration

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)


def create_s3_client(config: StorageConfiguration, endpoint_url: Optional[str] = None) -> "S3Client":
    """
    Build a boto3 S3 client bound to the configured region and credentials.

    :param config: Storage options holding the credentials and region.
    :param endpoint_url: Optional S3-compatible endpoint, e.g. a MinIO server.
    """
    client_kwargs = {
        'region_name': config.region,
        'aws_access_key_id': config.access_key_id,
        'aws_secret_access_key': config.secret_access_key,
        # Presigned URLs carry X-Amz-Expires only with SigV4
        'config': Config(signature_version='s3v4'),
    }
    if endpoint_url:
        client_kwargs['endpoint_url'] = endpoint_url

    client = boto3.client('s3', **client_kwargs)
    logger.debug(f"Created s3 client for region {config.region} (endpoint: {client.meta.endpoint_url})")
    return client
