"""Per-bucket storage options and their mapping onto persisted settings."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

OPTION_ACCESS_KEY_ID = "s3_access_key_id"
OPTION_SECRET_ACCESS_KEY = "s3_secret_access_key"
OPTION_REGION = "s3_region"
OPTION_BUCKET = "s3_bucket"
OPTION_EXPIRATION = "s3_expiration"

DEFAULT_REGION = "us-east-2"

DEFAULT_OPTIONS = {
    OPTION_ACCESS_KEY_ID: None,
    OPTION_SECRET_ACCESS_KEY: None,
    OPTION_REGION: DEFAULT_REGION,
    OPTION_BUCKET: None,
    OPTION_EXPIRATION: 0,
}


def normalize_expiration(value: Any) -> int:
    """Convert to an integer number of minutes, zero for anything non-positive."""
    try:
        expiration = int(value)
    except (TypeError, ValueError):
        return 0
    return expiration if expiration > 0 else 0


class StorageConfiguration(BaseModel):
    """Credentials, bucket and URL policy for one bucket.

    ``expiration_minutes == 0`` means objects are public and URIs are plain
    links; a positive value means objects are private and URIs are presigned
    for that many minutes. Emptiness of the required fields is checked when a
    store is built from the configuration, not here, so a half-filled form
    can still be loaded and displayed.
    """

    access_key_id: str = ""
    secret_access_key: str = ""
    region: str = DEFAULT_REGION
    bucket: str = ""
    expiration_minutes: int = Field(default=0, ge=0)

    @field_validator("access_key_id", "secret_access_key", "bucket", mode="before")
    @classmethod
    def strip_required(cls, v):
        return (v or "").strip()

    @field_validator("region", mode="before")
    @classmethod
    def default_region(cls, v):
        return (v or "").strip() or DEFAULT_REGION

    @field_validator("expiration_minutes", mode="before")
    @classmethod
    def coerce_expiration(cls, v):
        return normalize_expiration(v)

    @property
    def is_public(self) -> bool:
        return self.expiration_minutes == 0

    @property
    def acl(self) -> str:
        return "public-read" if self.is_public else "private"

    def missing_options(self) -> list:
        """Names of the required options that are still empty."""
        missing = []
        if not self.access_key_id:
            missing.append(OPTION_ACCESS_KEY_ID)
        if not self.secret_access_key:
            missing.append(OPTION_SECRET_ACCESS_KEY)
        if not self.bucket:
            missing.append(OPTION_BUCKET)
        return missing

    @classmethod
    def from_provider(cls, provider) -> "StorageConfiguration":
        """Read the options from a settings provider, applying the defaults."""
        return cls(
            access_key_id=provider.get(OPTION_ACCESS_KEY_ID, DEFAULT_OPTIONS[OPTION_ACCESS_KEY_ID]),
            secret_access_key=provider.get(OPTION_SECRET_ACCESS_KEY, DEFAULT_OPTIONS[OPTION_SECRET_ACCESS_KEY]),
            region=provider.get(OPTION_REGION, DEFAULT_OPTIONS[OPTION_REGION]),
            bucket=provider.get(OPTION_BUCKET, DEFAULT_OPTIONS[OPTION_BUCKET]),
            expiration_minutes=provider.get(OPTION_EXPIRATION, DEFAULT_OPTIONS[OPTION_EXPIRATION]),
        )

    def save_to(self, provider) -> None:
        provider.set(OPTION_ACCESS_KEY_ID, self.access_key_id)
        provider.set(OPTION_SECRET_ACCESS_KEY, self.secret_access_key)
        provider.set(OPTION_REGION, self.region)
        provider.set(OPTION_BUCKET, self.bucket)
        provider.set(OPTION_EXPIRATION, self.expiration_minutes)
