"""S3 fixtures shared by the tests."""
import boto3
import pytest
from moto import mock_aws

from s3_store.adapters.storage import S3Store
from s3_store.config.settings import get_settings
from s3_store.config.storage import StorageConfiguration
from tests.consts import (
    TEST_ACCESS_KEY_ID,
    TEST_BUCKET_NAME,
    TEST_IMAGE_CONTENT,
    TEST_REGION,
    TEST_SECRET_ACCESS_KEY,
)


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Point boto3 at fake credentials and clear any store settings from the environment."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", TEST_ACCESS_KEY_ID)
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", TEST_SECRET_ACCESS_KEY)
    monkeypatch.setenv("AWS_DEFAULT_REGION", TEST_REGION)
    monkeypatch.delenv("AWS_ENDPOINT_URL", raising=False)
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    for name in ("S3_STORE_ARCHIVE_REPERTORY_ACTIVE", "S3_STORE_SETTINGS_FILE", "S3_STORE_VERIFY_MOVES"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mocked_aws():
    with mock_aws():
        s3_client = boto3.client("s3", region_name=TEST_REGION)
        s3_client.create_bucket(
            Bucket=TEST_BUCKET_NAME,
            CreateBucketConfiguration={"LocationConstraint": TEST_REGION},
        )
        yield


@pytest.fixture
def s3_client(mocked_aws):
    return boto3.client("s3", region_name=TEST_REGION)


@pytest.fixture
def storage_config():
    return StorageConfiguration(
        access_key_id=TEST_ACCESS_KEY_ID,
        secret_access_key=TEST_SECRET_ACCESS_KEY,
        region=TEST_REGION,
        bucket=TEST_BUCKET_NAME,
        expiration_minutes=0,
    )


@pytest.fixture
def store(mocked_aws, storage_config):
    return S3Store(storage_config)


@pytest.fixture
def private_store(mocked_aws, storage_config):
    return S3Store(storage_config.model_copy(update={"expiration_minutes": 10}))


@pytest.fixture
def local_image(tmp_path):
    path = tmp_path / "x.jpg"
    path.write_bytes(TEST_IMAGE_CONTENT)
    return str(path)
