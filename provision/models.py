from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_REGION = "eu-west-2"
DEFAULT_DEPARTMENTS = ("Marketing", "Sales", "HR", "Operations", "Media")


class Environment(str, Enum):
    LOCAL = "local"
    TESTING = "testing"
    PRODUCTION = "production"

    @property
    def message(self) -> str:
        return f"Running provisioning for the {self.value} environment"

    @classmethod
    def choices(cls) -> list[str]:
        return [member.value for member in cls]


class ComputeRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    instance_type: str = "t2.micro"
    image_id: str = "ami-0cd59ecaf368e5ccf"
    count: int = Field(default=2, ge=1)
    key_name: str = "MyKeyPair"
    region: str = DEFAULT_REGION


class StorageRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    company: str = "datawise"
    # Order is creation order; duplicates are kept and requested twice.
    departments: tuple[str, ...] = DEFAULT_DEPARTMENTS
    suffix: str = "data-bucket"
    region: str = DEFAULT_REGION
    lowercase_names: bool = False


class ProvisionSettings(BaseModel):
    """Everything a single run needs, built once by the CLI and passed down."""

    model_config = ConfigDict(frozen=True)

    environment: Environment
    cli_binary: str = "aws"
    credential_var: str = "AWS_PROFILE"
    credential_profile: str
    compute: ComputeRequest = ComputeRequest()
    storage: StorageRequest = StorageRequest()
    dry_run: bool = False
    strict: bool = False
