import secrets

def new_id(nbytes: int = 6) -> str:
    return secrets.token_hex(nbytes)

def new_short_id(length: int = 6) -> str:
    """Upper-case id for people-facing records (staff, results)."""
    return secrets.token_hex(length).upper()[:length]
