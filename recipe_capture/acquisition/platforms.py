from enum import Enum
from urllib.parse import urlparse

from ..core.errors import UnsupportedPlatform


class Platform(str, Enum):
    YOUTUBE = "youtube"
    TIKTOK = "tiktok"
    INSTAGRAM = "instagram"
    FACEBOOK = "facebook"
    PINTEREST = "pinterest"
    WEBSITE = "website"


# host suffix -> platform
PLATFORM_HOSTS = {
    "youtube.com": Platform.YOUTUBE,
    "youtu.be": Platform.YOUTUBE,
    "tiktok.com": Platform.TIKTOK,
    "instagram.com": Platform.INSTAGRAM,
    "facebook.com": Platform.FACEBOOK,
    "fb.watch": Platform.FACEBOOK,
    "pin.it": Platform.PINTEREST,
}

# Platforms whose posts carry audio/video worth transcribing or analyzing
MEDIA_PLATFORMS = {
    Platform.YOUTUBE,
    Platform.TIKTOK,
    Platform.INSTAGRAM,
    Platform.FACEBOOK,
}


def _host_matches(host: str, suffix: str) -> bool:
    return host == suffix or host.endswith("." + suffix)


def detect_platform(url: str) -> Platform:
    """
    Map a URL to its platform.
    Any other http(s) URL with a host is treated as a recipe website.
    Raises UnsupportedPlatform for empty, non-http(s) or host-less URLs.
    """
    if not url or not url.strip():
        raise UnsupportedPlatform(url or "", "URL is required")

    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise UnsupportedPlatform(url)

    host = parsed.hostname.lower()
    for suffix, platform in PLATFORM_HOSTS.items():
        if _host_matches(host, suffix):
            return platform

    # pinterest.com, pinterest.co.uk, pinterest.fr ...
    labels = host.split(".")
    if "pinterest" in labels[:-1]:
        return Platform.PINTEREST

    return Platform.WEBSITE


def has_media(platform: Platform) -> bool:
    return platform in MEDIA_PLATFORMS
