from __future__ import annotations

import logging
import os
from typing import Mapping

import click
import typer
import yaml

from provision.logging_config import configure_logging
from provision.models import DEFAULT_DEPARTMENTS, DEFAULT_REGION, ComputeRequest, ProvisionSettings, StorageRequest
from provision.services import preconditions
from provision.services.errors import PROVISIONING_FAILED_EXIT_CODE, ProvisionException, UsageException
from provision.services.run import run_provisioning

configure_logging()
logger = logging.getLogger(__name__)
app = typer.Typer(
    help="Provision EC2 instances and department S3 buckets for a deployment environment.",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def _exit_for_domain_error(exc: ProvisionException) -> None:
    logger.warning("Provisioning aborted: %s", exc)
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=exc.exit_code)


def _echo_yaml_entity(entity: object) -> None:
    typer.echo(yaml.safe_dump(entity, sort_keys=False), nl=False)


def _resolve_departments(departments: list[str] | None, environ: Mapping[str, str]) -> tuple[str, ...]:
    if departments:
        return tuple(departments)
    raw = environ.get("PROVISION_DEPARTMENTS", "")
    parsed = tuple(part.strip() for part in raw.split(",") if part.strip())
    return parsed or DEFAULT_DEPARTMENTS


@app.command()
def provision(
    args: list[str] | None = typer.Argument(
        None, metavar="ENVIRONMENT", help="One of: local, testing, production.", show_default=False
    ),
    *,
    cli_binary: str = typer.Option("aws", "--cli", envvar="PROVISION_CLI", help="Cloud CLI executable."),
    credential_var: str = typer.Option(
        "AWS_PROFILE",
        "--credential-var",
        envvar="PROVISION_CREDENTIAL_VAR",
        help="Environment variable holding the credential profile name.",
    ),
    region: str = typer.Option(DEFAULT_REGION, "--region", envvar="PROVISION_REGION"),
    instance_type: str = typer.Option("t2.micro", "--instance-type", envvar="PROVISION_INSTANCE_TYPE"),
    image_id: str = typer.Option("ami-0cd59ecaf368e5ccf", "--image-id", envvar="PROVISION_IMAGE_ID"),
    count: int = typer.Option(2, "--count", min=1, envvar="PROVISION_INSTANCE_COUNT"),
    key_name: str = typer.Option("MyKeyPair", "--key-name", envvar="PROVISION_KEY_NAME"),
    company: str = typer.Option("datawise", "--company", envvar="PROVISION_COMPANY"),
    departments: list[str] | None = typer.Option(
        None,
        "--department",
        help="Department to create a bucket for; repeat for several. "
        "Defaults to PROVISION_DEPARTMENTS (comma separated) or the built-in list.",
        show_default=False,
    ),
    lowercase_bucket_names: bool = typer.Option(
        False,
        "--lowercase-bucket-names",
        envvar="PROVISION_LOWERCASE_BUCKET_NAMES",
        help="Lowercase bucket names so they satisfy S3 naming rules.",
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", envvar="PROVISION_DRY_RUN", help="Log the AWS CLI commands without running them."
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        envvar="PROVISION_STRICT",
        help=f"Exit with status {PROVISIONING_FAILED_EXIT_CODE} when any resource fails to provision.",
    ),
    summary: bool = typer.Option(True, "--summary/--no-summary", help="Print a YAML run summary at the end."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every AWS CLI command."),
) -> None:
    if verbose:
        configure_logging(verbose=True)
    environ = os.environ
    try:
        token = preconditions.validate_arguments(args)
        environment = preconditions.activate_environment(token)
        typer.echo(environment.message)
        preconditions.require_cli(cli_binary)
        profile = preconditions.require_credentials(credential_var, environ)
    except ProvisionException as e:
        _exit_for_domain_error(e)

    settings = ProvisionSettings(
        environment=environment,
        cli_binary=cli_binary,
        credential_var=credential_var,
        credential_profile=profile,
        compute=ComputeRequest(
            instance_type=instance_type,
            image_id=image_id,
            count=count,
            key_name=key_name,
            region=region,
        ),
        storage=StorageRequest(
            company=company,
            departments=_resolve_departments(departments, environ),
            region=region,
            lowercase_names=lowercase_bucket_names,
        ),
        dry_run=dry_run,
        strict=strict,
    )

    report = run_provisioning(settings, echo=typer.echo)
    if summary:
        _echo_yaml_entity(report.summary())

    if settings.strict and report.failed:
        typer.echo(f"Error: {report.failed} resource(s) failed to provision", err=True)
        raise typer.Exit(code=PROVISIONING_FAILED_EXIT_CODE)


def main(args: list[str] | None = None) -> None:
    """Console entry point. Option parse errors exit with the wrong-arguments status, not 2."""
    try:
        exit_code = app(args=args, prog_name="datawise-provision", standalone_mode=False)
    except click.UsageError as e:
        logger.warning("Invalid command line: %s", e.format_message())
        if e.ctx is not None:
            typer.echo(e.ctx.get_usage(), err=True)
        typer.echo(f"Error: {e.format_message()}", err=True)
        raise SystemExit(UsageException.exit_code)
    except click.ClickException as e:
        e.show()
        raise SystemExit(e.exit_code)
    except click.Abort:
        typer.echo("Aborted!", err=True)
        raise SystemExit(1)
    raise SystemExit(exit_code if isinstance(exit_code, int) else 0)


if __name__ == "__main__":
    main()
