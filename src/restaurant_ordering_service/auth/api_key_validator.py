"""Staff access key validation for back-office endpoints.

Staff screens (order queue, menu management, sales) send a shared access key
in the ``X-API-Key`` header. Keys are compared against a configured set.
"""

import hmac


class APIKeyValidator:
    """Validates staff access keys.

    Configuration is injected at construction and validation returns a plain
    bool; the FastAPI dependency turns a False into a 401.
    """

    def __init__(self, api_keys: list[str]) -> None:
        """Initialize validator with the accepted staff keys.

        Args:
            api_keys: Valid staff access keys

        Raises:
            ValueError: If api_keys list is empty
        """
        if not api_keys:
            raise ValueError("At least one staff API key must be provided")

        self.api_keys = frozenset(api_keys)

    def validate(self, api_key: str) -> bool:
        """Validate a staff access key.

        Args:
            api_key: The key sent by the client

        Returns:
            bool: True if valid, False otherwise
        """
        if not api_key:
            return False
        return any(hmac.compare_digest(api_key, key) for key in self.api_keys)
