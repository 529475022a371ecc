from typing import Protocol


class TokenPort(Protocol):
    def token(self, length: int) -> str:
        """Return a random lowercase base32 token of the given length."""
        ...
