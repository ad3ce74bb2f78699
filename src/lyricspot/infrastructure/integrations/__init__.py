"""HTTP clients for external catalogs.

Clients return raw JSON-ish dicts and raise on transport/decode errors.
Turning that into domain objects (and "no match") is the providers' job.
"""

from lyricspot.infrastructure.integrations.http_pool import HttpClientPool
from lyricspot.infrastructure.integrations.itunes_client import ITunesClient
from lyricspot.infrastructure.integrations.lrclib_client import LrclibClient
from lyricspot.infrastructure.integrations.musicbrainz_client import MusicBrainzClient

__all__ = [
    "HttpClientPool",
    "ITunesClient",
    "LrclibClient",
    "MusicBrainzClient",
]
