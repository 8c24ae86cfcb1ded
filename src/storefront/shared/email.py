"""Customer email normalisation and validation."""

from storefront.errors import InvalidEmail

_FORBIDDEN = (";", ",", "(", ")", '"', ":", "<", ">", "[", "]", "\\")


def _reject(email):
    raise InvalidEmail({"customer_email": [f"Please enter a valid email address (got {email!r})"]})


def normalize_email(email):
    """Return ``email`` trimmed and lower-cased, or raise ``InvalidEmail``.

    Enforces structural validity: exactly one @, non-empty local part, a
    dotted domain without empty labels, no whitespace, no consecutive dots
    and no forbidden characters.
    """
    if not email or not isinstance(email, str):
        _reject(email)

    email = email.strip().lower()

    if any(ch.isspace() for ch in email) or len(email) > 254:
        _reject(email)

    if email.count("@") != 1:
        _reject(email)

    local_part, domain_part = email.split("@", 1)

    if not local_part or local_part.startswith(".") or local_part.endswith("."):
        _reject(email)

    if "." not in domain_part or domain_part.startswith(".") or domain_part.endswith("."):
        _reject(email)

    for label in domain_part.split("."):
        if not label or label.startswith("-") or label.endswith("-"):
            _reject(email)

    if ".." in local_part:
        _reject(email)

    if any(forbidden in email for forbidden in _FORBIDDEN):
        _reject(email)

    return email
