import pytest

from s3_store.adapters.file_manager import FileManager, S3FileManager
from s3_store.adapters.settings_store import InMemorySettingsProvider
from s3_store.config.settings import Settings
from s3_store.errors import ConfigurationError
from s3_store.factory import StoreFactory
from tests.consts import TEST_BUCKET_NAME


@pytest.fixture
def provider(storage_config):
    provider = InMemorySettingsProvider()
    storage_config.save_to(provider)
    return provider


def test_services_without_archive_organizer(mocked_aws, provider, tmp_path):
    settings = Settings(archive_repertory_active=False, files_dir=str(tmp_path), derivative_types=["large"])

    services = StoreFactory.create_services(settings, provider)

    assert services.store.bucket == TEST_BUCKET_NAME
    assert type(services.file_manager) is FileManager
    assert services.file_manager.base_path == str(tmp_path)
    assert services.file_manager.folder_types() == ["original", "large"]


def test_services_with_archive_organizer(mocked_aws, provider):
    settings = Settings(archive_repertory_active=True, derivative_types=["large"], verify_moves=True)

    services = StoreFactory.create_services(settings, provider)

    assert isinstance(services.file_manager, S3FileManager)
    assert services.file_manager.store is services.store
    assert services.file_manager.base_path == f"s3://{TEST_BUCKET_NAME}/"
    assert services.file_manager.folder_types() == ["original", "large"]
    assert services.store.verify_moves


def test_services_require_credentials():
    with pytest.raises(ConfigurationError):
        StoreFactory.create_services(Settings(), InMemorySettingsProvider({"s3_bucket": TEST_BUCKET_NAME}))


def test_store_uses_endpoint_from_settings(storage_config):
    store = StoreFactory.create_store(storage_config, Settings(aws_endpoint_url="http://localhost:9000"))

    assert store.client.meta.endpoint_url == "http://localhost:9000"
