from typing import Optional

from pydantic import TypeAdapter

_STRING_LIST = TypeAdapter(list[str])


def split_lines(text: str) -> list[str]:
    """Split a newline separated metadata listing into its non-empty lines.

    Example:
        >>> split_lines("ssh-keys\\n  startup-script \\n\\n")
        ['ssh-keys', 'startup-script']
    """
    lines = (line.strip() for line in text.strip().split("\n"))
    return [line for line in lines if line]


def last_path_segment(text: str) -> str:
    """Get the part of a slash separated resource name after the last slash.

    Example:
        >>> last_path_segment("projects/424242/zones/europe-west3-c")
        'europe-west3-c'
    """
    return text.rsplit("/", maxsplit=1)[-1]


def parse_string_list(text: str) -> list[str]:
    """Parse a JSON array of strings.

    Raises
    ------
    `pydantic.ValidationError`
        If `text` is not valid JSON or not an array of strings.
        (`ValidationError` is a subclass of `ValueError`.)
    """
    return _STRING_LIST.validate_json(text)


def normalize_service_account(service_account: Optional[str]) -> str:
    """Return the service account name to use in a metadata path.

    Example:
        >>> normalize_service_account(None)
        'default'
        >>> normalize_service_account("sa@project.iam.gserviceaccount.com")
        'sa@project.iam.gserviceaccount.com'
    """
    if service_account is None or not service_account.strip():
        return "default"
    return service_account
