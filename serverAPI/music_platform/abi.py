# abi.py

from .errors import AdapterFailure

MODULE_NAME = "players"

STRING = "0x1::string::String"

# Entry and view functions of the on-chain `players` module.
# Parameter order and names are fixed by the deployed contract.
MODULE_ABI = [
    {
        "name": "initialize",
        "is_entry": True,
        "is_view": False,
        "params": [],
        "return": [],
    },
    {
        "name": "register_artist",
        "is_entry": True,
        "is_view": False,
        "params": [
            {"name": "name", "type": STRING},
            {"name": "bio", "type": STRING},
        ],
        "return": [],
    },
    {
        "name": "upload_track",
        "is_entry": True,
        "is_view": False,
        "params": [
            {"name": "title", "type": STRING},
            {"name": "genre", "type": STRING},
            {"name": "duration_ms", "type": "u64"},
            {"name": "ipfs_hash", "type": STRING},
            {"name": "royalty_rate", "type": "u64"},  # basis points
        ],
        "return": [],
    },
    {
        "name": "get_platform_stats",
        "is_entry": False,
        "is_view": True,
        "params": [],
        "return": [
            {"name": "total_tracks", "type": "u64"},
            {"name": "total_artists", "type": "u64"},
            {"name": "total_plays", "type": "u64"},
            {"name": "platform_earnings", "type": "u64"},  # octas
        ],
    },
    {
        "name": "get_track",
        "is_entry": False,
        "is_view": True,
        "params": [{"name": "track_id", "type": "u64"}],
        "return": [
            {"name": "id", "type": "u64"},
            {"name": "title", "type": STRING},
            {"name": "artist_address", "type": "address"},
            {"name": "genre", "type": STRING},
            {"name": "duration_ms", "type": "u64"},
            {"name": "ipfs_hash", "type": STRING},
            {"name": "royalty_rate", "type": "u64"},
            {"name": "play_count", "type": "u64"},
            {"name": "created_at", "type": "u64"},
        ],
    },
    {
        "name": "get_artist",
        "is_entry": False,
        "is_view": True,
        "params": [{"name": "artist_address", "type": "address"}],
        "return": [
            {"name": "address", "type": "address"},
            {"name": "name", "type": STRING},
            {"name": "bio", "type": STRING},
            {"name": "total_tracks", "type": "u64"},
            {"name": "total_earnings", "type": "u64"},
            {"name": "verified", "type": "bool"},
            {"name": "registered_at", "type": "u64"},
        ],
    },
    {
        "name": "get_playlist",
        "is_entry": False,
        "is_view": True,
        "params": [{"name": "playlist_id", "type": "u64"}],
        "return": [
            {"name": "id", "type": "u64"},
            {"name": "name", "type": STRING},
            {"name": "owner", "type": "address"},
            {"name": "tracks", "type": "vector<u64>"},
            {"name": "is_public", "type": "bool"},
            {"name": "created_at", "type": "u64"},
            {"name": "play_count", "type": "u64"},
        ],
    },
]

_BY_NAME = {entry["name"]: entry for entry in MODULE_ABI}


def function_id(module_address, name):
    return f"{module_address}::{MODULE_NAME}::{name}"


def function_name(function):
    """`0xabc::players::get_track` -> `get_track`."""
    return function.rsplit("::", 1)[-1]


def lookup(name):
    try:
        return _BY_NAME[name]
    except KeyError:
        raise AdapterFailure(f"Unknown function {MODULE_NAME}::{name}")


def param_types(name):
    return [p["type"] for p in lookup(name)["params"]]


def coerce(value, move_type):
    if move_type in ("u8", "u16", "u32", "u64", "u128", "u256"):
        return int(value)
    if move_type == "bool":
        if isinstance(value, str):
            return value.lower() == "true"
        return bool(value)
    if move_type.startswith("vector<u"):
        return [int(v) for v in value]
    return value


def decode_view(name, raw):
    """Map a raw view result onto the named outputs declared for `name`.

    Views may answer with a flat tuple matching the outputs, or with a single
    struct (JSON object) carrying the same field names.
    """
    outputs = lookup(name)["return"]
    if len(raw) == 1 and isinstance(raw[0], dict):
        fields = raw[0]
        missing = [o["name"] for o in outputs if o["name"] not in fields]
        if missing:
            raise AdapterFailure(f"{name}: missing fields {missing}")
        values = [fields[o["name"]] for o in outputs]
    elif len(raw) == len(outputs):
        values = list(raw)
    else:
        raise AdapterFailure(f"{name}: expected {len(outputs)} values, got {len(raw)}")

    try:
        return {o["name"]: coerce(v, o["type"]) for o, v in zip(outputs, values)}
    except (TypeError, ValueError) as e:
        raise AdapterFailure(f"{name}: malformed view result", e)
