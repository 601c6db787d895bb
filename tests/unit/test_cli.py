"""Tests for the command line interface."""

import pytest

from swapper.cli import build_parser, main, parse_token
from swapper.config import DEFAULT_CHAIN_CONFIG
from tests.helpers import TOKEN_A, TOKEN_B, WPEPU


class TestParseToken:
    def test_native_keyword(self):
        assert parse_token("native", DEFAULT_CHAIN_CONFIG).is_native

    def test_zero_address_is_native(self):
        assert parse_token("0x" + "00" * 20, DEFAULT_CHAIN_CONFIG).is_native

    def test_address_with_decimals(self):
        token = parse_token(TOKEN_A.upper().replace("0X", "0x") + ":6", DEFAULT_CHAIN_CONFIG)
        assert token.address == TOKEN_A
        assert token.decimals == 6

    def test_invalid_address(self):
        with pytest.raises(ValueError):
            parse_token("0x12", DEFAULT_CHAIN_CONFIG)


class TestPathCommands:
    def test_encode_path(self, capsys):
        assert main(["encode-path", TOKEN_A, "500", WPEPU, "3000", TOKEN_B]) == 0
        out = capsys.readouterr().out.strip()
        assert out == "0x" + "aa" * 20 + "0001f4" + WPEPU[2:] + "000bb8" + "bb" * 20

    def test_encode_path_needs_odd_items(self, capsys):
        assert main(["encode-path", TOKEN_A, "500"]) == 2
        assert "expected" in capsys.readouterr().err

    def test_decode_path(self, capsys):
        encoded = "0x" + "aa" * 20 + "0001f4" + "bb" * 20
        assert main(["decode-path", encoded]) == 0
        assert capsys.readouterr().out.split() == [TOKEN_A, "500", TOKEN_B]

    def test_decode_invalid_path(self, capsys):
        assert main(["decode-path", "0x1234"]) == 2
        assert "Invalid path length" in capsys.readouterr().err


class TestParser:
    def test_quote_arguments(self):
        args = build_parser().parse_args(["quote", "native", TOKEN_A, "1.5", "--slippage-bps", "100"])
        assert (args.token_in, args.token_out, args.amount, args.slippage_bps) == (
            "native",
            TOKEN_A,
            "1.5",
            100,
        )

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])
