"""FastAPI dependencies for staff authentication."""

from typing import Annotated

from fastapi import Header, HTTPException

from restaurant_ordering_service.auth.api_key_validator import APIKeyValidator


def require_staff_key(
    x_api_key: Annotated[str | None, Header()] = None,
    validator: APIKeyValidator | None = None,
) -> str:
    """Check the X-API-Key header of a back-office request.

    Args:
        x_api_key: Staff key from the X-API-Key header (injected by FastAPI)
        validator: Validator holding the accepted keys

    Returns:
        str: The validated key

    Raises:
        HTTPException: 401 if the key is missing or not accepted
    """
    if not x_api_key:
        raise HTTPException(status_code=401, detail="Missing staff API key")

    if validator is not None and not validator.validate(x_api_key):
        raise HTTPException(status_code=401, detail="Invalid staff API key")

    return x_api_key
