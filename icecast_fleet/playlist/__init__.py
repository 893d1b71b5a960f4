"""
Playlist Module

Generates m3u and pls playlists that spread listeners across the relays.
"""

from .generator import (
    PlaylistGenerator,
    PLAYLIST_FORMATS,
    playlist_entries,
    playlist_nodes,
    render_m3u,
    render_pls,
)

__all__ = [
    "PlaylistGenerator",
    "PLAYLIST_FORMATS",
    "playlist_entries",
    "playlist_nodes",
    "render_m3u",
    "render_pls",
]
