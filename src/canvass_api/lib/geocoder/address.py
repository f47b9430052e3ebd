"""One-line address formatting for verification queries."""


def one_line_address(
    *,
    street_1: str | None = None,
    street_2: str | None = None,
    city: str | None = None,
    state: str | None = None,
    zip_code: str | None = None,
) -> str:
    """Join address parts into ``"STREET, UNIT, CITY, ST ZIP"`` form.

    Empty and whitespace-only parts are dropped.

    Returns:
        The formatted address, or an empty string if no part has content.
    """
    state_zip = " ".join(part.strip() for part in (state, zip_code) if part and part.strip())
    parts = [street_1, street_2, city, state_zip]
    return ", ".join(part.strip() for part in parts if part and part.strip())
