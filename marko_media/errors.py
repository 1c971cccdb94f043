class MediaConfigError(ValueError):
    """Invalid media extension options (bad JSON, unknown category, malformed references)."""
