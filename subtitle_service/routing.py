"""
URL routing: recognize a platform URL and parse its route fields.

Subtitle-capable platforms have path patterns that produce the route
fields their adapters read. Other recognized hosts resolve to their
platform with no route fields so validation can report them as unsupported.
"""

import re
from dataclasses import dataclass, field
from urllib.parse import parse_qs, urlparse

from subtitle_service.platforms import Platform


@dataclass
class RouteMatch:
    """A recognized URL: its platform and the fields parsed from it."""

    platform: Platform
    pattern_match: dict[str, str] = field(default_factory=dict)


# Host suffix -> platform. Checked against the host and its parent domains.
HOSTS: dict[str, Platform] = {
    "youtube.com": Platform.youtube,
    "youtu.be": Platform.youtube,
    "vimeo.com": Platform.vimeo,
    "vk.com": Platform.vk,
    "vkvideo.ru": Platform.vk,
    "tiktok.com": Platform.tiktok,
    "twitter.com": Platform.twitter,
    "x.com": Platform.twitter,
    "rutube.ru": Platform.rutube,
    "loom.com": Platform.loom,
    "bilibili.com": Platform.bilibili,
    "b23.tv": Platform.bilibili,
    "bsky.app": Platform.bluesky,
    "facebook.com": Platform.facebook,
    "fb.watch": Platform.facebook,
    "instagram.com": Platform.instagram,
    "ok.ru": Platform.ok,
    "pinterest.com": Platform.pinterest,
    "pin.it": Platform.pinterest,
    "reddit.com": Platform.reddit,
    "snapchat.com": Platform.snapchat,
    "soundcloud.com": Platform.soundcloud,
    "streamable.com": Platform.streamable,
    "tumblr.com": Platform.tumblr,
    "twitch.tv": Platform.twitch,
    "xiaohongshu.com": Platform.xiaohongshu,
    "xhslink.com": Platform.xiaohongshu,
}

# Pre-compiled path patterns per platform; named groups become route fields
PATTERNS: dict[Platform, list[re.Pattern]] = {
    Platform.youtube: [
        re.compile(r"^/(?:shorts|embed|live|v)/(?P<id>[\w-]{11})"),
        re.compile(r"^/(?P<id>[\w-]{11})$"),
    ],
    Platform.vimeo: [
        re.compile(r"^/(?:video/)?(?P<id>\d+)(?:/(?P<password>[\da-f]+))?/?$"),
    ],
    Platform.vk: [
        re.compile(r"^/(?:video|clip)(?P<owner_id>-?\d+)_(?P<video_id>\d+)(?:_(?P<access_key>[\da-f]+))?/?$"),
    ],
    Platform.tiktok: [
        re.compile(r"^/@[^/]+/video/(?P<post_id>\d+)"),
        re.compile(r"^/(?:v|embed/v2)/(?P<post_id>\d+)"),
        re.compile(r"^/(?:t/)?(?P<short_link>[\w-]+)/?$"),
    ],
    Platform.twitter: [
        re.compile(r"^/(?:[\w]+|i)/status/(?P<id>\d+)(?:/(?:video|photo)/(?P<index>\d))?"),
    ],
    Platform.rutube: [
        re.compile(r"^/(?:video|play/embed|shorts)/(?P<id>[\da-f]{32})"),
        re.compile(r"^/yappy/(?P<yappy_id>[\da-f]{32})"),
    ],
    Platform.loom: [
        re.compile(r"^/(?:share|embed)/(?P<id>[\da-f]{32})"),
    ],
}


def is_http_url(url: str) -> bool:
    """Return True for absolute http(s) URLs with a host."""
    if not url.startswith(("http://", "https://")):
        return False
    try:
        return bool(urlparse(url).hostname)
    except ValueError:
        return False


def _platform_for_host(host: str) -> Platform | None:
    parts = host.lower().split(".")
    for start in range(len(parts) - 1):
        platform = HOSTS.get(".".join(parts[start:]))
        if platform is not None:
            return platform
    return None


def _youtube_query_id(query: dict[str, list[str]]) -> str | None:
    ids = query.get("v")
    return ids[0] if ids else None


def match_url(url: str) -> RouteMatch | None:
    """
    Recognize a URL and parse its route fields.

    Args:
        url: Absolute http(s) URL

    Returns:
        RouteMatch, or None when the host is unknown or the URL is malformed

    Examples:
        >>> match_url("https://www.youtube.com/watch?v=dQw4w9WgXcQ").pattern_match
        {'id': 'dQw4w9WgXcQ'}
        >>> match_url("https://x.com/user/status/123/video/2").pattern_match
        {'id': '123', 'index': '2'}
        >>> match_url("https://example.com/video") is None
        True
    """
    if not is_http_url(url):
        return None

    parsed = urlparse(url)
    platform = _platform_for_host(parsed.hostname or "")
    if platform is None:
        return None

    fields: dict[str, str] = {}
    query = parse_qs(parsed.query)

    for pattern in PATTERNS.get(platform, []):
        match = pattern.search(parsed.path)
        if match:
            fields = {name: value for name, value in match.groupdict().items() if value}
            break

    if platform == Platform.youtube and "id" not in fields:
        video_id = _youtube_query_id(query)
        if video_id:
            fields["id"] = video_id
    elif platform == Platform.rutube and "id" in fields and query.get("p"):
        fields["key"] = query["p"][0]

    return RouteMatch(platform=platform, pattern_match=fields)
