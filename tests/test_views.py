import unittest
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from music_platform.chain import ChainClient
from music_platform.config import Settings
from music_platform.errors import AdapterFailure, TransactionFailed
from music_platform.main import create_app
from music_platform.wallet import INJECTED_BINDING

MODULE = "0x" + "a" * 64
KEY = "0x" + "11" * 32

STATS = {"total_tracks": 10, "total_artists": 3, "total_plays": 500, "platform_earnings": 200000000}


def make_client(private_key=KEY, module_address=MODULE, dev_wallet=True):
    chain = MagicMock()
    chain.account_from_key = ChainClient.account_from_key
    chain.view_decoded = AsyncMock(return_value=STATS)
    chain.submit_local = AsyncMock(return_value="0xlocal")
    chain.wait_for_inclusion = AsyncMock()
    chain.close = AsyncMock()
    app = create_app(
        settings=Settings(module_address=module_address, private_key=private_key, dev_wallet=dev_wallet),
        chain=chain,
    )
    return TestClient(app), chain, app.state.wallet


TRACK_FORM = {
    "title": "Song",
    "genre": "Pop",
    "duration": "180",
    "ipfs_hash": "Qm123",
    "royalty_rate": "10",
}


class TestPages(unittest.TestCase):
    def test_home_shows_stats(self):
        client, chain, _ = make_client()
        response = client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertIn("500", response.text)
        self.assertIn("2 APT", response.text)
        chain.view_decoded.assert_awaited_with("get_platform_stats")

    def test_home_survives_chain_failure(self):
        client, chain, _ = make_client()
        chain.view_decoded.side_effect = AdapterFailure("node down")
        response = client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertIn("0 APT", response.text)

    def test_explore_search(self):
        client, _, _ = make_client()
        response = client.get("/explore", params={"q": "ambient"})
        self.assertIn("Ocean Waves", response.text)
        self.assertNotIn("Urban Rhythm", response.text)

        artists = client.get("/explore", params={"tab": "artists", "q": "hip hop"})
        self.assertIn("Beat Maker", artists.text)
        self.assertNotIn("Wave Master", artists.text)

    def test_artist_page(self):
        client, _, _ = make_client()
        response = client.get("/artist/0x123...abc")
        self.assertEqual(response.status_code, 200)
        self.assertIn("Digital Dreams", response.text)
        self.assertIn("Midnight Dreams", response.text)

    def test_unknown_artist_and_playlist(self):
        client, _, _ = make_client()
        artist = client.get("/artist/0xnobody")
        self.assertEqual(artist.status_code, 404)
        self.assertIn("Artist Not Found", artist.text)
        self.assertIn("Playlist Not Found", client.get("/playlist/99").text)

    def test_playlist_page(self):
        client, _, _ = make_client()
        response = client.get("/playlist/1")
        self.assertIn("Chill Vibes", response.text)
        self.assertIn("Digital Rain", response.text)

    def test_profile_and_upload_ask_for_wallet(self):
        client, _, _ = make_client()
        self.assertIn("Connect Your Wallet", client.get("/profile").text)
        self.assertIn("Connect Your Wallet", client.get("/upload").text)


class TestWalletFlow(unittest.TestCase):
    def test_connect_and_disconnect(self):
        client, _, wallet = make_client()

        page = client.post("/wallet/connect")
        self.assertTrue(wallet.connected)
        self.assertIn("Development wallet connected!", page.text)
        self.assertIn(wallet.address, client.get("/profile").text)

        page = client.post("/wallet/disconnect")
        self.assertFalse(wallet.connected)
        self.assertIn("Wallet disconnected", page.text)

    def test_connect_without_any_wallet(self):
        client, _, wallet = make_client(private_key=None)
        page = client.post("/wallet/connect")
        self.assertFalse(wallet.connected)
        self.assertIn("No wallet found", page.text)

    def test_server_key_not_offered_without_dev_wallet(self):
        client, chain, wallet = make_client(dev_wallet=False)
        headers = {"Origin": "https://evil.example"}

        page = client.post("/wallet/connect", headers=headers)
        self.assertFalse(wallet.connected)
        self.assertIn("No wallet found", page.text)

        page = client.post("/upload/artist", data={"name": "Me", "bio": ""}, headers=headers)
        self.assertIn("Please connect your wallet first", page.text)
        chain.submit_local.assert_not_called()

    def test_cross_origin_post_preflight_refused(self):
        client, _, _ = make_client()
        response = client.options("/wallet/connect", headers={
            "Origin": "https://evil.example",
            "Access-Control-Request-Method": "POST",
        })
        self.assertEqual(response.status_code, 400)

    def test_injected_session_restored_on_load(self):
        client, _, wallet = make_client(private_key=None)
        signer = MagicMock()
        signer.is_connected = AsyncMock(return_value=True)
        signer.account = AsyncMock(return_value={"address": "0x" + "b" * 64})
        wallet.bindings[INJECTED_BINDING] = signer

        response = client.get("/profile")

        self.assertTrue(wallet.connected)
        self.assertIn("0x" + "b" * 64, response.text)


class TestMutations(unittest.TestCase):
    def test_upload_requires_connection(self):
        client, chain, _ = make_client()
        page = client.post("/upload/track", data=TRACK_FORM)
        self.assertIn("Please connect your wallet first", page.text)
        chain.submit_local.assert_not_called()

        page = client.post("/upload/artist", data={"name": "Me", "bio": ""})
        self.assertIn("Please connect your wallet first", page.text)
        chain.submit_local.assert_not_called()

    def test_register_artist(self):
        client, chain, wallet = make_client()
        client.post("/wallet/connect")

        page = client.post("/upload/artist", data={"name": "Digital Dreams", "bio": "Ambient"})

        self.assertIn("Artist registered successfully!", page.text)
        self.assertIn('action="/upload/track"', page.text)
        payload = chain.submit_local.await_args.args[1]
        self.assertEqual(payload.function, f"{MODULE}::players::register_artist")
        self.assertEqual(payload.arguments, ("Digital Dreams", "Ambient"))

    def test_upload_track_converts_units(self):
        client, chain, _ = make_client()
        client.post("/wallet/connect")

        page = client.post("/upload/track", data=TRACK_FORM)

        self.assertIn("Track uploaded successfully!", page.text)
        payload = chain.submit_local.await_args.args[1]
        self.assertTrue(payload.function.endswith("::players::upload_track"))
        self.assertEqual(payload.to_dict()["arguments"], ["Song", "Pop", "180000", "Qm123", "1000"])

    def test_upload_track_failure_is_a_notice(self):
        client, chain, wallet = make_client()
        client.post("/wallet/connect")
        chain.submit_local.side_effect = TransactionFailed("upload_track", RuntimeError("out of gas"))

        page = client.post("/upload/track", data=TRACK_FORM)

        self.assertEqual(page.status_code, 200)
        self.assertIn("Failed to upload track", page.text)
        self.assertTrue(wallet.connected)

    def test_upload_track_validation(self):
        client, chain, _ = make_client()
        client.post("/wallet/connect")

        page = client.post("/upload/track", data=dict(TRACK_FORM, duration="3:00"))
        self.assertIn("whole numbers", page.text)
        page = client.post("/upload/track", data=dict(TRACK_FORM, royalty_rate="150"))
        self.assertIn("between 0 and 100%", page.text)
        chain.submit_local.assert_not_called()

    def test_profile_edit_is_local_only(self):
        client, chain, _ = make_client()
        client.post("/wallet/connect")
        page = client.post("/profile", data={"name": "New", "bio": "Bio"})
        self.assertIn("Profile updated successfully!", page.text)
        chain.submit_local.assert_not_called()

    def test_file_upload_is_stubbed(self):
        client, _, _ = make_client()
        client.post("/wallet/connect")
        page = client.post("/upload/file")
        self.assertIn("File upload feature coming soon!", page.text)


if __name__ == "__main__":
    unittest.main()
