"""Builds the store and the folder organizer from settings."""

import logging
from dataclasses import dataclass
from typing import Optional

from s3_store.adapters.file_manager import FileManager, S3FileManager
from s3_store.adapters.settings_store import BaseSettingsProvider, JsonFileSettingsProvider
from s3_store.adapters.storage import S3Store
from s3_store.config.settings import Settings, get_settings
from s3_store.config.storage import StorageConfiguration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreServices:
    """Everything a request needs to read and write stored files."""
    store: S3Store
    file_manager: FileManager


class StoreFactory:
    """Factory to build stores from persisted options and process settings"""

    @staticmethod
    def get_settings_provider(settings: Optional[Settings] = None) -> BaseSettingsProvider:
        settings = settings or get_settings()
        return JsonFileSettingsProvider(settings.settings_file)

    @staticmethod
    def create_store(
        config: StorageConfiguration,
        settings: Optional[Settings] = None,
        client=None,
    ) -> S3Store:
        """Create a store for the configuration; raises ConfigurationError if incomplete."""
        settings = settings or get_settings()
        return S3Store(
            config,
            client=client,
            endpoint_url=settings.aws_endpoint_url,
            verify_moves=settings.verify_moves,
        )

    @staticmethod
    def create_services(
        settings: Optional[Settings] = None,
        provider: Optional[BaseSettingsProvider] = None,
    ) -> StoreServices:
        """
        Create the store and the folder organizer.

        The organizer works on the bucket when the archive organizer is active,
        otherwise on the local files directory. The archive flag is read once
        from the settings passed in.
        """
        settings = settings or get_settings()
        provider = provider or StoreFactory.get_settings_provider(settings)

        config = StorageConfiguration.from_provider(provider)
        store = StoreFactory.create_store(config, settings)

        if settings.archive_repertory_active:
            file_manager = S3FileManager(store, settings.derivative_types)
        else:
            file_manager = FileManager(settings.files_dir, settings.derivative_types)

        logger.info(
            f"Storage services ready for bucket '{store.bucket}' "
            f"(region: {config.region}, archive organizer: {settings.archive_repertory_active})"
        )
        return StoreServices(store=store, file_manager=file_manager)
