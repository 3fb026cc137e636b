def text_field(data, key, default=""):
    """Stripped string value of ``key`` in a JSON body.

    Missing or null gives ``default``; any other non-string raises ValueError
    so the route can answer 400 instead of failing on ``.strip()``.
    """
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value.strip()
