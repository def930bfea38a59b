def to_uppercase(value: str | None) -> str | None:
    """
    Uppercase and strip a raw environment value; None passes through.
    """
    if value is None:
        return None
    return str(value).strip().upper()


def to_lowercase(value: str | None) -> str | None:
    """
    Lowercase and strip a raw environment value; None passes through.
    """
    if value is None:
        return None
    return str(value).strip().lower()
