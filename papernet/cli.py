"""papernet-redeem: redeem a commercial paper as a DigiBank participant.

Usage:
    papernet-redeem
    papernet-redeem --identity balaji --paper-number 00001 --redeem-date 2020-11-30
    papernet-redeem --profile connection-org2.yaml --commit-timeout 30

Runs against the in-memory PaperNet sandbox (MagnetoCorp paper 00001,
bought by DigiBank). Exit status 0 when the paper is REDEEMED, 1 when any
phase fails.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from papernet.core.result import Err, Ok
from papernet.gateway.profile import ConnectionProfile, load_connection_profile
from papernet.infra.config import RedeemDefaults
from papernet.infra.sandbox import build_sandbox
from papernet.workflow.paper import redeem_paper
from papernet.workflow.types import InvocationTarget

logger = logging.getLogger(__name__)


def build_parser(defaults: RedeemDefaults | None = None) -> argparse.ArgumentParser:
    d = defaults or RedeemDefaults()
    parser = argparse.ArgumentParser(
        prog="papernet-redeem",
        description="Redeem a commercial paper on the PaperNet sandbox network.",
    )
    parser.add_argument("--identity", default=d.identity, help="wallet label to submit as")
    parser.add_argument("--channel", default=d.channel)
    parser.add_argument("--contract", default=d.contract_name, help="chaincode name")
    parser.add_argument("--namespace", default=d.contract_namespace, help="contract namespace")
    parser.add_argument("--issuer", default=d.issuer)
    parser.add_argument("--paper-number", default=d.paper_number)
    parser.add_argument("--owner", default=d.redeeming_owner, help="redeeming owner")
    parser.add_argument("--owner-msp", default=d.redeeming_owner_msp, help="redeeming owner MSP id")
    parser.add_argument("--redeem-date", default=d.redeem_date)
    parser.add_argument(
        "--profile", default=None,
        help="connection profile YAML (default: the sandbox Org2 profile)",
    )
    parser.add_argument(
        "--commit-timeout", type=float, default=None,
        help="seconds to wait for the commit event",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


async def run(args: argparse.Namespace) -> int:
    sandbox = build_sandbox()
    profile: ConnectionProfile = sandbox.profile
    if args.profile is not None:
        match load_connection_profile(args.profile):
            case Err(error):
                print(f"Error processing transaction. {error.message}")
                return 1
            case Ok(profile):
                pass

    target = InvocationTarget(
        identity=args.identity,
        channel=args.channel,
        contract_name=args.contract,
        contract_namespace=args.namespace,
    )
    result = await redeem_paper(
        sandbox.network.transport(),
        profile,
        sandbox.wallet,
        target,
        args.issuer,
        args.paper_number,
        args.owner,
        args.owner_msp,
        args.redeem_date,
        commit_timeout_s=args.commit_timeout,
        progress=print,
    )
    match result:
        case Ok(_):
            return 0
        case Err(failure):
            print(f"Error processing transaction. {failure.message}")
            return 1


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        code = asyncio.run(run(args))
    except Exception:
        logger.exception("Redeem program failed unexpectedly")
        print("Redeem program exception.")
        return 1
    print("Redeem program complete.")
    return code


if __name__ == "__main__":
    sys.exit(main())
