"""
Mock channel directory responses for testing.

Mirrors the shape of the iptv-org channels.json and streams.json documents.
"""

IPTV_CHANNELS_RESPONSE = [
    {
        "id": "ZeeTV.in",
        "name": "Zee TV",
        "country": "IN",
        "languages": ["hin"],
        "categories": ["entertainment"],
        "broadcast_area": ["c/IN"],
        "is_nsfw": False,
        "logo": "https://i.imgur.com/zeetv.png",
    },
    {
        "id": "StarPlusUSA.us",
        "name": "Star Plus USA",
        "country": "US",
        "languages": ["hin"],
        "categories": ["entertainment"],
        "broadcast_area": ["c/US"],
        "is_nsfw": False,
    },
    {
        "id": "France24.fr",
        "name": "France 24",
        "country": "FR",
        "languages": ["fra"],
        "categories": ["news"],
        "broadcast_area": ["c/FR"],
        "is_nsfw": False,
    },
    {
        "id": "SunTVAsia.sg",
        "name": "Sun TV Asia",
        "country": "SG",
        "languages": [],
        "categories": ["movies"],
        "broadcast_area": ["India"],
        "is_nsfw": False,
    },
]

IPTV_STREAMS_RESPONSE = [
    {
        "channel": "ZeeTV.in",
        "url": "https://cdn.example.com/zeetv/index.m3u8",
        "http_referrer": "https://zee.example.com",
        "status": "online",
        "width": 1280,
        "height": 720,
    },
    {
        "channel": "France24.fr",
        "url": "https://cdn.example.com/france24/index.m3u8",
    },
    {"channel": "Broken.in", "url": None},
]
