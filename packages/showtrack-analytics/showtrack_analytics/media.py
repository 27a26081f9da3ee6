"""Replay media locations for settled rounds."""

DEFAULT_MEDIA_BASE_URL = "https://media.groundsplatform.com/streamer"


def stream_url(external_id: str, base_url: str = DEFAULT_MEDIA_BASE_URL) -> str:
    """HLS playlist of the round's replay clip."""
    return f"{base_url.rstrip('/')}/clips/{external_id}/index.m3u8"


def thumbnail_url(external_id: str, base_url: str = DEFAULT_MEDIA_BASE_URL) -> str:
    """Still image of the round's replay clip."""
    return f"{base_url.rstrip('/')}/thumbs/{external_id}.jpg"
