import os

import pytest
from typer.testing import CliRunner

from tests.aws_utils import RecordingRunner


@pytest.fixture
def recording_runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture()
def cli_runner(monkeypatch, recording_runner):
    # Keep the host's AWS and PROVISION_* settings out of the CLI under test.
    for name in list(os.environ):
        if name.startswith("PROVISION_") or name == "AWS_PROFILE":
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("AWS_PROFILE", "datawise-dev")
    monkeypatch.setattr("shutil.which", lambda binary: f"/usr/local/bin/{binary}")
    monkeypatch.setattr("provision.proc.default_runner", recording_runner)

    from provision.cli import app

    return CliRunner(), app
