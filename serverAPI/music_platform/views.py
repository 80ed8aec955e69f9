# views.py

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from . import catalog
from .errors import AdapterFailure, NotConnected, TransactionFailed
from .payloads import (
    OCTAS_PER_APT,
    account_url,
    format_apt_amount,
    percent_to_bps,
    register_artist_payload,
    seconds_to_ms,
    shorten_address,
    transaction_url,
    upload_track_payload,
)
from .wallet import WalletSession

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["duration"] = catalog.format_duration
templates.env.filters["date"] = catalog.format_date
templates.env.filters["short"] = shorten_address
templates.env.filters["apt"] = lambda octas: f"{octas / OCTAS_PER_APT:g}"
templates.env.filters["apt_exact"] = format_apt_amount

router = APIRouter()

CONNECT_FIRST = "Please connect your wallet first"


async def get_wallet(request: Request) -> WalletSession:
    wallet = request.app.state.wallet
    await wallet.restore()
    return wallet


def render(request, wallet, name, status_code=200, **context):
    context.update(wallet=wallet, notices=wallet.notices.drain())
    return templates.TemplateResponse(request, name, context, status_code=status_code)


def back(request, default="/"):
    return RedirectResponse(request.headers.get("referer") or default, status_code=303)


async def submit(wallet, payload, ok_message, fail_message, node_url):
    """Run one mutating action and turn its outcome into a notice. Returns the hash or None."""
    try:
        txn_hash = await wallet.sign_and_submit(payload)
    except NotConnected:
        wallet.notices.error(CONNECT_FIRST)
        return None
    except TransactionFailed as e:
        logger.error(f"{fail_message}: {e.cause}")
        wallet.notices.error(fail_message)
        return None
    wallet.notices.success(ok_message)
    logger.info(f"{ok_message} {transaction_url(txn_hash, node_url)}")
    return txn_hash


# === Wallet ===

@router.post("/wallet/connect")
async def connect_wallet(request: Request, wallet: WalletSession = Depends(get_wallet)):
    await wallet.connect()
    return back(request)


@router.post("/wallet/disconnect")
async def disconnect_wallet(request: Request, wallet: WalletSession = Depends(get_wallet)):
    wallet.disconnect()
    return back(request)


# === Pages ===

@router.get("/", response_class=HTMLResponse)
async def home(request: Request, wallet: WalletSession = Depends(get_wallet)):
    stats = {"total_tracks": 0, "total_artists": 0, "total_plays": 0, "platform_earnings": 0}
    try:
        stats = await request.app.state.chain.view_decoded("get_platform_stats")
    except AdapterFailure as e:
        logger.error(f"Failed to fetch stats: {e}")
    return render(request, wallet, "home.html", stats=stats)


@router.get("/explore", response_class=HTMLResponse)
async def explore(request: Request, q: str = "", tab: str = "tracks",
                  wallet: WalletSession = Depends(get_wallet)):
    if tab not in ("tracks", "artists"):
        tab = "tracks"
    return render(
        request, wallet, "explore.html",
        q=q, tab=tab,
        tracks=catalog.search_tracks(q),
        artists=catalog.search_artists(q),
    )


@router.get("/artist/{address}", response_class=HTMLResponse)
async def artist_page(request: Request, address: str, wallet: WalletSession = Depends(get_wallet)):
    artist = catalog.get_artist(address)
    if not artist:
        return render(request, wallet, "not_found.html", status_code=404, kind="Artist")
    return render(
        request, wallet, "artist.html",
        artist=artist,
        tracks=catalog.artist_tracks(address),
        explorer_url=account_url(address, request.app.state.settings.node_url),
    )


@router.get("/playlist/{playlist_id}", response_class=HTMLResponse)
async def playlist_page(request: Request, playlist_id: str, wallet: WalletSession = Depends(get_wallet)):
    playlist = catalog.get_playlist(playlist_id)
    if not playlist:
        return render(request, wallet, "not_found.html", status_code=404, kind="Playlist")
    tracks = catalog.playlist_tracks(playlist)
    return render(
        request, wallet, "playlist.html",
        playlist=playlist, tracks=tracks, total_ms=catalog.total_duration(tracks),
    )


@router.get("/profile", response_class=HTMLResponse)
async def profile(request: Request, tab: str = "overview", wallet: WalletSession = Depends(get_wallet)):
    if not wallet.connected:
        return render(request, wallet, "connect.html", purpose="view your profile and manage your content")
    if tab not in ("overview", "tracks", "playlists", "earnings"):
        tab = "overview"
    return render(request, wallet, "profile.html", tab=tab, **catalog.profile_for(wallet.address))


@router.post("/profile")
async def edit_profile(request: Request, name: str = Form(""), bio: str = Form(""),
                       wallet: WalletSession = Depends(get_wallet)):
    if not wallet.connected:
        wallet.notices.error(CONNECT_FIRST)
        return RedirectResponse("/profile", status_code=303)
    # Profile edits are not on-chain yet.
    logger.info(f"Profile edit for {wallet.address}: {name!r}")
    wallet.notices.success("Profile updated successfully!")
    return RedirectResponse("/profile", status_code=303)


# === Upload ===

@router.get("/upload", response_class=HTMLResponse)
async def upload_page(request: Request, step: str = "artist", wallet: WalletSession = Depends(get_wallet)):
    if not wallet.connected:
        return render(request, wallet, "connect.html", purpose="upload tracks and register as an artist")
    if step not in ("artist", "track"):
        step = "artist"
    return render(request, wallet, "upload.html", step=step)


@router.post("/upload/artist")
async def register_artist(request: Request, name: str = Form(""), bio: str = Form(""),
                          wallet: WalletSession = Depends(get_wallet)):
    settings = request.app.state.settings
    if not wallet.connected:
        wallet.notices.error(CONNECT_FIRST)
        return RedirectResponse("/upload", status_code=303)
    if not name.strip():
        wallet.notices.error("Artist name is required")
        return RedirectResponse("/upload", status_code=303)
    if not settings.module_address:
        wallet.notices.error("MODULE_ADDRESS is not set")
        return RedirectResponse("/upload", status_code=303)

    payload = register_artist_payload(settings.module_address, name, bio)
    txn_hash = await submit(wallet, payload, "Artist registered successfully!",
                            "Failed to register artist", settings.node_url)
    return RedirectResponse("/upload?step=track" if txn_hash else "/upload", status_code=303)


@router.post("/upload/track")
async def upload_track(request: Request,
                       title: str = Form(""),
                       genre: str = Form(""),
                       duration: str = Form(""),
                       ipfs_hash: str = Form(""),
                       royalty_rate: str = Form(""),
                       wallet: WalletSession = Depends(get_wallet)):
    settings = request.app.state.settings
    step_url = "/upload?step=track"
    if not wallet.connected:
        wallet.notices.error(CONNECT_FIRST)
        return RedirectResponse(step_url, status_code=303)
    if not (title.strip() and genre.strip() and ipfs_hash.strip()):
        wallet.notices.error("Title, genre and IPFS hash are required")
        return RedirectResponse(step_url, status_code=303)
    try:
        duration_ms = seconds_to_ms(duration)
        royalty_bps = percent_to_bps(royalty_rate)
    except ValueError:
        wallet.notices.error("Duration and royalty rate must be whole numbers")
        return RedirectResponse(step_url, status_code=303)
    if int(duration_ms) <= 0:
        wallet.notices.error("Duration must be greater than 0")
        return RedirectResponse(step_url, status_code=303)
    if not 0 <= int(royalty_bps) <= 10_000:
        wallet.notices.error("Royalty rate must be between 0 and 100%")
        return RedirectResponse(step_url, status_code=303)
    if not settings.module_address:
        wallet.notices.error("MODULE_ADDRESS is not set")
        return RedirectResponse(step_url, status_code=303)

    payload = upload_track_payload(settings.module_address, title, genre, duration_ms, ipfs_hash, royalty_bps)
    await submit(wallet, payload, "Track uploaded successfully!", "Failed to upload track", settings.node_url)
    return RedirectResponse(step_url, status_code=303)


@router.post("/upload/file")
async def upload_file(wallet: WalletSession = Depends(get_wallet)):
    # TODO: pin the audio to IPFS and prefill ipfs_hash with the returned CID
    wallet.notices.info("File upload feature coming soon!")
    return RedirectResponse("/upload?step=track", status_code=303)
