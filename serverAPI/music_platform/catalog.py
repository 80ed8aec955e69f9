# catalog.py
# Demo catalogue for the pages. On-chain listing needs an off-chain index,
# so browse screens run on this data.

import time
from datetime import datetime

DAY_MS = 86_400_000


def _now_ms():
    return int(time.time() * 1000)


def _tracks():
    now = _now_ms()
    return [
        {"id": "1", "title": "Midnight Dreams", "artist_address": "0x123...abc", "genre": "Electronic",
         "duration_ms": 180000, "play_count": 1250, "created_at": now - DAY_MS},
        {"id": "2", "title": "Ocean Waves", "artist_address": "0x456...def", "genre": "Ambient",
         "duration_ms": 240000, "play_count": 890, "created_at": now - 2 * DAY_MS},
        {"id": "3", "title": "Urban Rhythm", "artist_address": "0x789...ghi", "genre": "Hip Hop",
         "duration_ms": 210000, "play_count": 2100, "created_at": now - 3 * DAY_MS},
        {"id": "4", "title": "Neon Lights", "artist_address": "0x123...abc", "genre": "Electronic",
         "duration_ms": 210000, "play_count": 890, "created_at": now - 2 * DAY_MS},
        {"id": "5", "title": "Digital Rain", "artist_address": "0x123...abc", "genre": "Ambient",
         "duration_ms": 240000, "play_count": 650, "created_at": now - 3 * DAY_MS},
    ]


def _artists():
    now = _now_ms()
    return [
        {"address": "0x123...abc", "name": "Digital Dreams",
         "bio": "Electronic music producer creating ambient soundscapes",
         "total_tracks": 15, "total_earnings": 5_000_000_000, "verified": True,
         "registered_at": now - 90 * DAY_MS},
        {"address": "0x456...def", "name": "Wave Master", "bio": "Ambient and chill music artist",
         "total_tracks": 8, "total_earnings": 3_000_000_000, "verified": False,
         "registered_at": now - 60 * DAY_MS},
        {"address": "0x789...ghi", "name": "Beat Maker", "bio": "Hip hop producer and beat maker",
         "total_tracks": 22, "total_earnings": 8_000_000_000, "verified": True,
         "registered_at": now - 120 * DAY_MS},
    ]


def _playlists():
    now = _now_ms()
    return [
        {"id": "1", "name": "Chill Vibes", "owner": "0x123...abc", "tracks": ["1", "2", "5"],
         "is_public": True, "created_at": now - 3 * DAY_MS, "play_count": 450},
        {"id": "2", "name": "Workout Mix", "owner": "0x123...abc", "tracks": ["1"],
         "is_public": False, "created_at": now - 6 * DAY_MS, "play_count": 120},
    ]


def _matches(term, *fields):
    term = (term or "").lower()
    return any(term in (f or "").lower() for f in fields)


def search_tracks(term=""):
    return [t for t in _tracks() if _matches(term, t["title"], t["genre"])]


def search_artists(term=""):
    return [a for a in _artists() if _matches(term, a["name"], a["bio"])]


def get_track(track_id):
    return next((t for t in _tracks() if t["id"] == track_id), None)


def get_artist(address):
    return next((a for a in _artists() if a["address"] == address), None)


def artist_tracks(address):
    return [t for t in _tracks() if t["artist_address"] == address]


def get_playlist(playlist_id):
    return next((p for p in _playlists() if p["id"] == playlist_id), None)


def playlist_tracks(playlist):
    by_id = {t["id"]: t for t in _tracks()}
    return [by_id[i] for i in playlist["tracks"] if i in by_id]


def profile_for(address):
    """Profile page data for the connected account (demo artist record under its address)."""
    base = get_artist("0x123...abc")
    artist = dict(base, address=address, total_tracks=2, total_earnings=2_500_000_000, verified=False)
    tracks = [t for t in artist_tracks("0x123...abc") if t["id"] in ("1", "4")]
    playlists = [p for p in _playlists() if p["owner"] == "0x123...abc"]
    return {"artist": artist, "tracks": tracks, "playlists": playlists}


# === Formatting ===

def format_duration(ms):
    minutes = ms // 60000
    seconds = (ms % 60000) // 1000
    return f"{minutes}:{seconds:02d}"


def total_duration(tracks):
    return sum(t["duration_ms"] for t in tracks)


def format_date(timestamp_ms):
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%d %b %Y")
