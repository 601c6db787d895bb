"""Command line interface for route discovery, quoting and path encoding.

Examples:
  swapper route native 0x<token>
  swapper quote 0x<tokenA>:6 0x<tokenB> 1.5 --slippage-bps 100
  swapper encode-path 0x<a> 3000 0x<b> 500 0x<c>
  swapper decode-path 0x<hex>
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import replace

import structlog

from swapper.amm.uniswap_v3.path import decode_path, encode_path_hex
from swapper.config import ChainConfig
from swapper.context import ChainContext
from swapper.engine import SwapEngine
from swapper.errors import SwapError
from swapper.log_config import configure_logging
from swapper.models import Token, is_native_address, normalize_address

logger = structlog.get_logger()


def parse_token(value: str, config: ChainConfig) -> Token:
    """Parse ``native``, ``<address>`` or ``<address>:<decimals>``."""
    address, _, decimals = value.partition(":")
    if address.lower() == "native" or is_native_address(address):
        return config.native_token
    return Token(
        address=normalize_address(address, validate=True),
        decimals=int(decimals) if decimals else 18,
    )


def _format_route(route_tokens: tuple[Token, ...], fees: tuple[int, ...]) -> str:
    parts = [route_tokens[0].symbol or route_tokens[0].address]
    for token, fee in zip(route_tokens[1:], fees, strict=True):
        parts.append(f"--[{fee / 10000:.2f}%]--> {token.symbol or token.address}")
    return " ".join(parts)


async def _route(engine: SwapEngine, args: argparse.Namespace) -> int:
    config = engine.context.config
    route = await engine.find_route(parse_token(args.token_in, config), parse_token(args.token_out, config))
    print(f"{route.kind.value}: {_format_route(route.path, route.fees)}")
    return 0


async def _quote(engine: SwapEngine, args: argparse.Namespace) -> int:
    config = engine.context.config
    token_in = parse_token(args.token_in, config)
    token_out = parse_token(args.token_out, config)
    amount_in = token_in.to_base_units(args.amount)
    quote = await engine.quote(token_in, token_out, amount_in)
    min_out = engine.min_out(quote, args.slippage_bps)

    print(f"Route:      {quote.route.kind.value} {_format_route(quote.route.path, quote.route.fees)}")
    if quote.fee_tier is not None:
        print(f"Best tier:  {quote.fee_tier}")
    print(f"Amount in:  {token_in.format_amount(amount_in)}")
    print(f"Amount out: {token_out.format_amount(quote.amount_out)}")
    print(f"Min out:    {token_out.format_amount(min_out)}")
    return 0


def _encode_path(args: argparse.Namespace) -> int:
    items = args.items
    if len(items) < 3 or len(items) % 2 == 0:
        print("Error: expected token fee token [fee token ...]", file=sys.stderr)
        return 2
    tokens = items[0::2]
    fees = [int(fee) for fee in items[1::2]]
    print(encode_path_hex(tokens, fees))
    return 0


def _decode_path(args: argparse.Namespace) -> int:
    tokens, fees = decode_path(args.path)
    print(tokens[0])
    for token, fee in zip(tokens[1:], fees, strict=True):
        print(f"  {fee}")
        print(token)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="swapper",
        description="Route discovery and quoting for UniswapV3-style pools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Examples:", 1)[1] if __doc__ else None,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--rpc-url", help="Override SWAPPER_RPC_URL")
    commands = parser.add_subparsers(dest="command", required=True)

    route = commands.add_parser("route", help="Find a route between two tokens")
    route.add_argument("token_in")
    route.add_argument("token_out")

    quote = commands.add_parser("quote", help="Quote an exact-input swap")
    quote.add_argument("token_in")
    quote.add_argument("token_out")
    quote.add_argument("amount", help="Human-readable input amount, e.g. 1.5")
    quote.add_argument("--slippage-bps", type=int, default=None)

    encode = commands.add_parser("encode-path", help="Encode a multihop path")
    encode.add_argument("items", nargs="+", help="token fee token [fee token ...]")

    decode = commands.add_parser("decode-path", help="Decode a packed multihop path")
    decode.add_argument("path")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        if args.command == "encode-path":
            return _encode_path(args)
        if args.command == "decode-path":
            return _decode_path(args)

        config = ChainConfig.from_env()
        if args.rpc_url:
            config = replace(config, rpc_url=args.rpc_url)
        engine = SwapEngine(ChainContext.connect(config))
        handler = _route if args.command == "route" else _quote
        return asyncio.run(handler(engine, args))
    except SwapError as e:
        logger.debug("command_failed", command=args.command, error=type(e).__name__)
        print(f"Error: {e.reason}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
