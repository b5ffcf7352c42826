from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable

from provision.aws import AwsCliAdapter
from provision.models import StorageRequest
from provision.proc import AdapterCommandError
from provision.services.naming import bucket_name_for_department, is_valid_bucket_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BucketResult:
    department: str
    bucket: str
    region: str
    succeeded: bool
    returncode: int | None = None
    error: str | None = None
    location: str | None = None

    @property
    def message(self) -> str:
        if self.succeeded:
            return f"S3 bucket {self.bucket} created successfully"
        return f"Failed to create S3 bucket {self.bucket}: {self.error}"


def bucket_names(request: StorageRequest) -> list[str]:
    return [
        bucket_name_for_department(
            request.company,
            department,
            suffix=request.suffix,
            lowercase=request.lowercase_names,
        )
        for department in request.departments
    ]


def provision_storage(
    aws: AwsCliAdapter,
    request: StorageRequest,
    *,
    on_result: Callable[[BucketResult], None] | None = None,
) -> list[BucketResult]:
    """Create one bucket per department, in order.

    Every department gets its request even when earlier ones fail. Nothing is
    rolled back.
    """
    results: list[BucketResult] = []
    for department, bucket in zip(request.departments, bucket_names(request)):
        if not is_valid_bucket_name(bucket):
            logger.warning(
                "Bucket name '%s' does not follow S3 naming rules; the request may be rejected "
                "(see --lowercase-bucket-names)",
                bucket,
            )
        result = _create_bucket(aws, department=department, bucket=bucket, region=request.region)
        results.append(result)
        if on_result is not None:
            on_result(result)
    return results


def _create_bucket(aws: AwsCliAdapter, *, department: str, bucket: str, region: str) -> BucketResult:
    try:
        created = aws.s3_create_bucket(bucket=bucket, region=region)
    except AdapterCommandError as exc:
        logger.error("Bucket creation failed for %s: %s", bucket, exc)
        return BucketResult(
            department=department,
            bucket=bucket,
            region=region,
            succeeded=False,
            returncode=exc.result.returncode,
            error=exc.detail or f"exit status {exc.result.returncode}",
        )
    except OSError as exc:
        logger.error("Could not run the AWS CLI for bucket %s: %s", bucket, exc)
        return BucketResult(department=department, bucket=bucket, region=region, succeeded=False, error=str(exc))

    return BucketResult(
        department=department,
        bucket=bucket,
        region=region,
        succeeded=True,
        returncode=0,
        location=created.location,
    )
