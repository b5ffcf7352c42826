from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging

from provision.models import ComputeRequest
from provision.proc import CommandResult, CommandRunner, run_command

logger = logging.getLogger(__name__)

# S3 rejects an explicit LocationConstraint for its default region.
S3_DEFAULT_REGION = "us-east-1"


@dataclass(frozen=True)
class RunInstancesResult:
    region: str
    instance_ids: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CreateBucketResult:
    bucket: str
    region: str
    location: str | None = None


class AwsCliAdapter:
    """Adapter for the EC2 and S3 operations of the ``aws`` command-line tool."""

    def __init__(
        self,
        *,
        binary: str = "aws",
        profile: str | None = None,
        runner: CommandRunner | None = None,
    ) -> None:
        self._binary = binary
        self._profile = profile
        self._runner = runner

    def ec2_run_instances(self, request: ComputeRequest) -> RunInstancesResult:
        logger.info(
            "Launching %s EC2 instance(s) in %s (type=%s image=%s key=%s)",
            request.count,
            request.region,
            request.instance_type,
            request.image_id,
            request.key_name,
        )
        result = run_command(
            self._command(
                "ec2",
                "run-instances",
                "--image-id",
                request.image_id,
                "--count",
                str(request.count),
                "--instance-type",
                request.instance_type,
                "--key-name",
                request.key_name,
                "--region",
                request.region,
            ),
            runner=self._runner,
            error_message=f"Failed to launch {request.count} instance(s) from {request.image_id}",
        )
        instance_ids = _parse_instance_ids(result)
        logger.debug("Launched instances: %s", instance_ids)
        return RunInstancesResult(region=request.region, instance_ids=instance_ids)

    def s3_create_bucket(self, *, bucket: str, region: str) -> CreateBucketResult:
        logger.info("Creating S3 bucket '%s' in %s", bucket, region)
        args = ["s3api", "create-bucket", "--bucket", bucket, "--region", region]
        if region != S3_DEFAULT_REGION:
            args.extend(["--create-bucket-configuration", f"LocationConstraint={region}"])
        result = run_command(
            self._command(*args),
            runner=self._runner,
            error_message=f"Failed to create bucket {bucket}",
        )
        payload = _parse_json_object(result)
        location = payload.get("Location")
        return CreateBucketResult(
            bucket=bucket,
            region=region,
            location=location if isinstance(location, str) else None,
        )

    def _command(self, *args: str) -> list[str]:
        cmd = [self._binary, *args]
        if self._profile:
            cmd.extend(["--profile", self._profile])
        return cmd


def _parse_json_object(result: CommandResult) -> dict:
    if not result.stdout.strip():
        return {}
    try:
        payload = json.loads(result.stdout)
    except json.JSONDecodeError:
        logger.debug("Ignoring non-JSON output from %s", " ".join(result.command[:3]))
        return {}
    return payload if isinstance(payload, dict) else {}


def _parse_instance_ids(result: CommandResult) -> list[str]:
    instances = _parse_json_object(result).get("Instances")
    if not isinstance(instances, list):
        return []
    return [
        item["InstanceId"]
        for item in instances
        if isinstance(item, dict) and isinstance(item.get("InstanceId"), str)
    ]
