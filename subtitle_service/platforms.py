"""
Platform identifiers and human-readable service names.
"""

from enum import Enum


class Platform(str, Enum):
    """Every content service the URL router recognizes."""

    bilibili = "bilibili"
    bluesky = "bsky"
    facebook = "facebook"
    instagram = "instagram"
    loom = "loom"
    ok = "ok"
    pinterest = "pinterest"
    reddit = "reddit"
    rutube = "rutube"
    snapchat = "snapchat"
    soundcloud = "soundcloud"
    streamable = "streamable"
    tiktok = "tiktok"
    tumblr = "tumblr"
    twitch = "twitch"
    twitter = "twitter"
    vimeo = "vimeo"
    vk = "vk"
    xiaohongshu = "xiaohongshu"
    youtube = "youtube"


# Names that don't follow the plain capitalization rule
SERVICE_NAMES: dict[str, str] = {
    "bilibili": "BiliBili",
    "bsky": "Bluesky",
    "ok": "Odnoklassniki",
    "reddit": "Reddit",
    "rutube": "RUTUBE",
    "soundcloud": "SoundCloud",
    "tiktok": "TikTok",
    "twitch": "Twitch Clips",
    "twitter": "Twitter",
    "vk": "VK",
    "xiaohongshu": "Xiaohongshu",
    "youtube": "YouTube",
}


def friendly_service_name(platform: "Platform | str") -> str:
    """
    Return the display name of a service.

    Examples:
        >>> friendly_service_name("youtube")
        'YouTube'
        >>> friendly_service_name(Platform.vimeo)
        'Vimeo'
    """
    key = platform_id(platform)
    return SERVICE_NAMES.get(key, key.capitalize())



def platform_id(platform: "Platform | str") -> str:
    """Return the plain string identifier of a platform."""
    return platform.value if isinstance(platform, Platform) else str(platform)
