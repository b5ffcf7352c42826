from __future__ import annotations

from dataclasses import dataclass, field
import logging

from provision.aws import AwsCliAdapter
from provision.models import ComputeRequest
from provision.proc import AdapterCommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstanceLaunchResult:
    request: ComputeRequest
    succeeded: bool
    instance_ids: list[str] = field(default_factory=list)
    returncode: int | None = None
    error: str | None = None

    @property
    def message(self) -> str:
        if self.succeeded:
            return (
                f"EC2 instances created successfully: {self.request.count} x {self.request.instance_type} "
                f"in {self.request.region}"
            )
        return f"Failed to create EC2 instances: {self.error}"


def provision_compute(aws: AwsCliAdapter, request: ComputeRequest) -> InstanceLaunchResult:
    """Issue the single run-instances request.

    A failing request is reported in the result, never raised.
    """
    try:
        launched = aws.ec2_run_instances(request)
    except AdapterCommandError as exc:
        logger.error("EC2 instance launch failed: %s", exc)
        return InstanceLaunchResult(
            request=request,
            succeeded=False,
            returncode=exc.result.returncode,
            error=exc.detail or f"exit status {exc.result.returncode}",
        )
    except OSError as exc:
        logger.error("Could not run the AWS CLI for EC2 launch: %s", exc)
        return InstanceLaunchResult(request=request, succeeded=False, error=str(exc))

    logger.info("EC2 launch succeeded: %s", launched.instance_ids or "no instance ids reported")
    return InstanceLaunchResult(
        request=request,
        succeeded=True,
        instance_ids=launched.instance_ids,
        returncode=0,
    )
