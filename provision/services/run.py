from __future__ import annotations

import logging
from typing import Callable

from pydantic import BaseModel

from provision.aws import AwsCliAdapter
from provision.models import Environment, ProvisionSettings
from provision.proc import CommandRunner, dry_run_runner
from provision.services.compute import InstanceLaunchResult, provision_compute
from provision.services.storage import BucketResult, provision_storage

logger = logging.getLogger(__name__)

Echo = Callable[[str], None]


class ProvisionReport(BaseModel):
    environment: Environment
    dry_run: bool
    compute: InstanceLaunchResult
    buckets: list[BucketResult]

    @property
    def failed(self) -> int:
        return int(not self.compute.succeeded) + sum(1 for bucket in self.buckets if not bucket.succeeded)

    @property
    def succeeded(self) -> int:
        return int(self.compute.succeeded) + sum(1 for bucket in self.buckets if bucket.succeeded)

    def summary(self) -> dict:
        payload = self.model_dump(mode="json")
        payload["succeeded"] = self.succeeded
        payload["failed"] = self.failed
        return payload


def build_adapter(settings: ProvisionSettings, *, runner: CommandRunner | None = None) -> AwsCliAdapter:
    if settings.dry_run:
        runner = dry_run_runner
    return AwsCliAdapter(binary=settings.cli_binary, profile=settings.credential_profile, runner=runner)


def run_provisioning(
    settings: ProvisionSettings,
    *,
    aws: AwsCliAdapter | None = None,
    echo: Echo | None = None,
) -> ProvisionReport:
    """Provision compute, then storage, and collect every outcome.

    Preconditions are checked by the caller before this runs.
    """
    emit = echo or (lambda _line: None)
    adapter = aws or build_adapter(settings)
    logger.info(
        "Provisioning %s environment (dry_run=%s, region=%s)",
        settings.environment.value,
        settings.dry_run,
        settings.compute.region,
    )

    compute = provision_compute(adapter, settings.compute)
    emit(compute.message)

    buckets = provision_storage(adapter, settings.storage, on_result=lambda result: emit(result.message))

    report = ProvisionReport(
        environment=settings.environment,
        dry_run=settings.dry_run,
        compute=compute,
        buckets=buckets,
    )
    logger.info("Provisioning finished: %s succeeded, %s failed", report.succeeded, report.failed)
    return report
