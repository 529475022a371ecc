import secrets

# Crockford-style alphabet: no i, l, o, u.
BASE32_ALPHABET = "0123456789abcdefghjkmnpqrstvwxyz"


class Base32TokenSource:
    """Random base32 tokens for conversation ids, message ids and aliases."""

    def token(self, length: int) -> str:
        return "".join(secrets.choice(BASE32_ALPHABET) for _ in range(length))
