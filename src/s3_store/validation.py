"""Round-trip checks run before new storage options are accepted."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from s3_store.adapters.storage import S3Store
from s3_store.config.storage import StorageConfiguration

logger = logging.getLogger(__name__)

WRONG_CREDENTIALS = "Wrong credentials. Unable to connect to Amazon S3 service."
WRONG_BUCKET = "Wrong bucket. Please specify an existing one, like: {examples}"
WRONG_REGION = "Wrong region. Please use region of a bucket: {region}"


@dataclass
class ValidationReport:
    """Outcome of checking a configuration against the service."""
    errors: List[str] = field(default_factory=list)
    buckets: List[str] = field(default_factory=list)
    bucket_region: Optional[str] = None

    @property
    def valid(self) -> bool:
        return not self.errors


def validate_configuration(store: S3Store, config: StorageConfiguration) -> ValidationReport:
    """
    Check credentials, bucket and region with the service.

    The checks run in order and stop at the first failing one, except that a
    region lookup failure is not reported (the bucket was already found).
    """
    report = ValidationReport()

    buckets = store.list_buckets()
    if not buckets.ok:
        logger.warning(f"Credential check failed: {buckets.message}")
        report.errors.append(WRONG_CREDENTIALS)
        return report
    report.buckets = buckets.value

    if config.bucket not in report.buckets:
        report.errors.append(WRONG_BUCKET.format(examples=", ".join(report.buckets[:3])))
        return report

    region = store.determine_bucket_region()
    if region.ok:
        report.bucket_region = region.value
        if region.value != config.region:
            report.errors.append(WRONG_REGION.format(region=region.value))

    return report
