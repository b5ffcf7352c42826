class ProvisionException(Exception):
    exit_code = 1


class UsageException(ProvisionException):
    exit_code = 1


class UnknownEnvironmentException(ProvisionException):
    exit_code = 2


class ToolingMissingException(ProvisionException):
    exit_code = 3


class CredentialsMissingException(ProvisionException):
    exit_code = 4


# Not raised by the provisioners; the CLI uses it for the --strict exit status.
PROVISIONING_FAILED_EXIT_CODE = 5
