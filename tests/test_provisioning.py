from __future__ import annotations

import subprocess

from provision.aws import AwsCliAdapter
from provision.models import ComputeRequest, Environment, ProvisionSettings, StorageRequest
from provision.services.compute import provision_compute
from provision.services.run import build_adapter, run_provisioning
from provision.services.storage import bucket_names, provision_storage
from tests.aws_utils import RecordingRunner, bucket_is, is_run_instances

EXPECTED_BUCKETS = [
    "datawise-Marketing-data-bucket",
    "datawise-Sales-data-bucket",
    "datawise-HR-data-bucket",
    "datawise-Operations-data-bucket",
    "datawise-Media-data-bucket",
]


def _settings(**overrides) -> ProvisionSettings:
    values = {"environment": Environment.TESTING, "credential_profile": "datawise-dev"}
    values.update(overrides)
    return ProvisionSettings(**values)


def test_compute_success_reports_instance_ids(recording_runner: RecordingRunner) -> None:
    out = provision_compute(AwsCliAdapter(runner=recording_runner), ComputeRequest())

    assert out.succeeded is True
    assert out.returncode == 0
    assert out.instance_ids == ["i-0aaa", "i-0bbb"]
    assert "created successfully" in out.message


def test_compute_failure_is_reported_not_raised(recording_runner: RecordingRunner) -> None:
    recording_runner.fail_when(is_run_instances, stderr="UnauthorizedOperation")

    out = provision_compute(AwsCliAdapter(runner=recording_runner), ComputeRequest())

    assert out.succeeded is False
    assert out.returncode == 254
    assert out.error == "UnauthorizedOperation"
    assert out.message.startswith("Failed to create EC2 instances")


def test_compute_missing_executable_is_reported() -> None:
    def runner(cmd: list[str]) -> subprocess.CompletedProcess[str]:
        raise FileNotFoundError(2, "No such file or directory", cmd[0])

    out = provision_compute(AwsCliAdapter(runner=runner), ComputeRequest())
    assert out.succeeded is False
    assert out.returncode is None


def test_storage_requests_every_department_in_order(recording_runner: RecordingRunner) -> None:
    results = provision_storage(AwsCliAdapter(runner=recording_runner), StorageRequest())

    assert recording_runner.buckets == EXPECTED_BUCKETS
    assert [result.bucket for result in results] == EXPECTED_BUCKETS
    assert all(result.succeeded for result in results)
    assert [result.location for result in results] == [f"/{name}" for name in EXPECTED_BUCKETS]
    for cmd in recording_runner.bucket_calls:
        assert cmd[cmd.index("--region") + 1] == "eu-west-2"


def test_storage_failure_does_not_stop_later_departments(recording_runner: RecordingRunner) -> None:
    recording_runner.fail_when(bucket_is("datawise-HR-data-bucket"), stderr="BucketAlreadyExists")
    seen: list[str] = []

    results = provision_storage(
        AwsCliAdapter(runner=recording_runner),
        StorageRequest(),
        on_result=lambda result: seen.append(result.bucket),
    )

    assert recording_runner.buckets == EXPECTED_BUCKETS
    assert seen == EXPECTED_BUCKETS
    assert [result.succeeded for result in results] == [True, True, False, True, True]
    assert results[2].error == "BucketAlreadyExists"
    assert results[2].department == "HR"


def test_storage_keeps_duplicate_departments(recording_runner: RecordingRunner) -> None:
    request = StorageRequest(departments=("Sales", "Sales"))
    provision_storage(AwsCliAdapter(runner=recording_runner), request)
    assert recording_runner.buckets == ["datawise-Sales-data-bucket", "datawise-Sales-data-bucket"]


def test_bucket_names_lowercase_option() -> None:
    assert bucket_names(StorageRequest(lowercase_names=True))[0] == "datawise-marketing-data-bucket"


def test_run_provisioning_end_to_end(recording_runner: RecordingRunner) -> None:
    settings = _settings()
    lines: list[str] = []

    report = run_provisioning(settings, aws=build_adapter(settings, runner=recording_runner), echo=lines.append)

    assert len(recording_runner.instance_calls) == 1
    assert recording_runner.calls[0][1:3] == ["ec2", "run-instances"]
    assert recording_runner.buckets == EXPECTED_BUCKETS
    assert all(cmd[-2:] == ["--profile", "datawise-dev"] for cmd in recording_runner.calls)
    assert report.succeeded == 6
    assert report.failed == 0
    assert len(lines) == 6
    assert report.summary()["buckets"][0]["location"] == "/datawise-Marketing-data-bucket"


def test_run_provisioning_counts_every_failure(recording_runner: RecordingRunner) -> None:
    recording_runner.fail_when(lambda cmd: True)
    settings = _settings()

    report = run_provisioning(settings, aws=build_adapter(settings, runner=recording_runner))

    assert len(recording_runner.calls) == 6
    assert report.failed == 6
    summary = report.summary()
    assert summary["failed"] == 6
    assert summary["environment"] == "testing"
    assert summary["compute"]["request"]["instance_type"] == "t2.micro"
    assert [bucket["succeeded"] for bucket in summary["buckets"]] == [False] * 5


def test_dry_run_issues_no_subprocess_calls(recording_runner: RecordingRunner) -> None:
    settings = _settings(dry_run=True)

    report = run_provisioning(settings, aws=build_adapter(settings, runner=recording_runner))

    assert recording_runner.calls == []
    assert report.failed == 0
    assert report.dry_run is True
