"""Provider adapters - domain ports implemented on top of the HTTP clients."""

from lyricspot.infrastructure.providers.artwork_fetcher import HttpArtworkFetcher
from lyricspot.infrastructure.providers.itunes_artist_image_provider import (
    ITunesArtistImageProvider,
)
from lyricspot.infrastructure.providers.lrclib_lyrics_provider import LrclibLyricsProvider
from lyricspot.infrastructure.providers.metadata_providers import (
    PROVIDER_ERRORS,
    ITunesMetadataProvider,
    MusicBrainzMetadataProvider,
)
from lyricspot.infrastructure.providers.opencc_script_normalizer import OpenCCScriptNormalizer

__all__ = [
    "PROVIDER_ERRORS",
    "HttpArtworkFetcher",
    "ITunesArtistImageProvider",
    "ITunesMetadataProvider",
    "LrclibLyricsProvider",
    "MusicBrainzMetadataProvider",
    "OpenCCScriptNormalizer",
]
