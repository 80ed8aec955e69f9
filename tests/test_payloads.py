import unittest

from music_platform.payloads import (
    TransactionPayload,
    account_url,
    create_transaction_payload,
    format_apt_amount,
    initialize_payload,
    network_name,
    parse_apt_amount,
    percent_to_bps,
    register_artist_payload,
    seconds_to_ms,
    shorten_address,
    transaction_url,
    upload_track_payload,
    validate_address,
)

MODULE = "0x" + "a" * 64


class TestTransactionPayload(unittest.TestCase):
    def test_upload_track_keeps_arguments_verbatim(self):
        payload = upload_track_payload(MODULE, "Song", "Pop", "180000", "Qm123", "1000")
        self.assertTrue(payload.function.endswith("::players::upload_track"))
        self.assertEqual(payload.to_dict()["arguments"], ["Song", "Pop", "180000", "Qm123", "1000"])
        self.assertEqual(payload.type_arguments, ())

    def test_generic_builder_matches_named_builder(self):
        generic = create_transaction_payload(
            MODULE, "upload_track", arguments=["Song", "Pop", "180000", "Qm123", "1000"]
        )
        self.assertEqual(generic, upload_track_payload(MODULE, "Song", "Pop", "180000", "Qm123", "1000"))

    def test_payload_is_immutable(self):
        payload = register_artist_payload(MODULE, "Name", "Bio")
        with self.assertRaises(AttributeError):
            payload.function = "0x1::other::fn"

    def test_to_dict(self):
        payload = register_artist_payload(MODULE, "Digital Dreams", "Ambient producer")
        self.assertEqual(payload.to_dict(), {
            "function": f"{MODULE}::players::register_artist",
            "type_arguments": [],
            "arguments": ["Digital Dreams", "Ambient producer"],
        })

    def test_initialize_takes_no_arguments(self):
        payload = initialize_payload(MODULE)
        self.assertEqual(payload, TransactionPayload(function=f"{MODULE}::players::initialize"))


class TestUnits(unittest.TestCase):
    def test_apt_amounts(self):
        self.assertEqual(format_apt_amount(200_000_000), "2.00000000")
        self.assertEqual(format_apt_amount(1), "0.00000001")
        self.assertEqual(parse_apt_amount("1.5"), 150_000_000)
        self.assertEqual(parse_apt_amount("0.123456789"), 12_345_678)

    def test_form_conversions(self):
        self.assertEqual(seconds_to_ms("180"), "180000")
        self.assertEqual(percent_to_bps("10"), "1000")
        with self.assertRaises(ValueError):
            seconds_to_ms("3:00")

    def test_addresses(self):
        address = "0x" + "ab" * 32
        self.assertTrue(validate_address(address))
        self.assertFalse(validate_address("0x123"))
        self.assertFalse(validate_address(None))
        self.assertEqual(shorten_address(address), "0xabab...abab")
        self.assertEqual(shorten_address(""), "")

    def test_explorer_links(self):
        self.assertEqual(network_name("https://fullnode.devnet.aptoslabs.com/v1"), "devnet")
        self.assertEqual(network_name("https://fullnode.testnet.aptoslabs.com/v1"), "testnet")
        self.assertEqual(network_name("https://fullnode.mainnet.aptoslabs.com/v1"), "mainnet")
        self.assertEqual(
            transaction_url("0xdead", "https://fullnode.devnet.aptoslabs.com/v1"),
            "https://explorer.aptoslabs.com/txn/0xdead?network=devnet",
        )
        self.assertEqual(
            account_url("0x1", "https://api.mainnet.aptoslabs.com/v1"),
            "https://explorer.aptoslabs.com/account/0x1?network=mainnet",
        )


if __name__ == "__main__":
    unittest.main()
