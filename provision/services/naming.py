from __future__ import annotations

import re

BUCKET_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9.-]{1,61}[a-z0-9]$")
_IP_ADDRESS_RE = re.compile(r"^\d{1,3}(\.\d{1,3}){3}$")

MIN_BUCKET_NAME_LEN = 3
MAX_BUCKET_NAME_LEN = 63


def bucket_name_for_department(
    company: str,
    department: str,
    *,
    suffix: str = "data-bucket",
    lowercase: bool = False,
) -> str:
    """Build ``{company}-{department}-{suffix}``.

    Department casing is kept as given unless ``lowercase`` is set; S3 rejects
    uppercase bucket names, see :func:`is_valid_bucket_name`.
    """
    name = f"{company}-{department}-{suffix}"
    if lowercase:
        return name.lower()
    return name


def is_valid_bucket_name(value: str) -> bool:
    if not MIN_BUCKET_NAME_LEN <= len(value) <= MAX_BUCKET_NAME_LEN:
        return False
    if not BUCKET_NAME_RE.fullmatch(value):
        return False
    if ".." in value or _IP_ADDRESS_RE.fullmatch(value):
        return False
    return True
