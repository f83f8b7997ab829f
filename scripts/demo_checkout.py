#!/usr/bin/env python3
"""Run a checkout from the command line.

Drives one session through account, shipping and payment, either
in-process or against a running checkout service. The demo inputs
(error@test.com, postcode 00000, card 4000000000000002) can be passed
to watch a step get rejected.

Usage:
    python scripts/demo_checkout.py
    python scripts/demo_checkout.py --url http://localhost:8000
    CHECKOUT_API_URL=http://checkout:8000 python scripts/demo_checkout.py --remote
    python scripts/demo_checkout.py --card 4000000000000002
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from checkout_wizard.application.checkout_orchestrator import (
    CheckoutOrchestrator,
    SessionRepository,
    StepOutcome,
)
from checkout_wizard.application.step_service import StepService
from checkout_wizard.domain.value_objects import AccountFields, PaymentFields, ShippingFields
from checkout_wizard.infrastructure.checkout_client import CheckoutApiClient
from checkout_wizard.infrastructure.config import settings
from checkout_wizard.infrastructure.logging_config import configure_logging
from checkout_wizard.infrastructure.latency import NoLatency


def report(step: str, outcome: StepOutcome) -> bool:
    """Print one step's outcome and tell whether to carry on."""
    if outcome.accepted:
        print(f"  ✓ {step}: {outcome.message or 'accepted'} ({outcome.identifier})")
        return True
    print(f"  ✗ {step}: {outcome.error}")
    return False


async def run_checkout(orchestrator: CheckoutOrchestrator, args: argparse.Namespace) -> bool:
    session = orchestrator.start()
    print(f"Session {session.id}")
    print()

    summary = await orchestrator.get_summary(args.discount_code)
    if summary is not None:
        for item in summary.items:
            print(f"  {item.name:<20} {item.price:>8} x{item.quantity}")
        print(f"  {'Total':<20} {summary.total:>8} {summary.currency}")
        if summary.discount is not None:
            print(f"  {'After discount':<20} {summary.discounted_total:>8} {summary.currency}")
        print()

    outcome = await orchestrator.submit_account(
        session, AccountFields(email=args.email, password=args.password)
    )
    if not report("Account", outcome):
        return False

    outcome = await orchestrator.submit_shipping(
        session,
        ShippingFields(
            address_line1="Flat 2",
            street_name="High Street",
            postcode=args.postcode,
            shipping_method=args.shipping_method,
        ),
    )
    if not report("Shipping", outcome):
        return False

    outcome = await orchestrator.submit_payment(
        session,
        PaymentFields(
            name_on_card="Jane Doe",
            card_number=args.card,
            expiration_month="12",
            expiration_year="2030",
            cvc="123",
        ),
    )
    if not report("Payment", outcome):
        return False

    confirmation = session.confirmation
    print()
    print(f"Order {confirmation.order_id}: {confirmation.total} {confirmation.currency}")
    print(f"Estimated delivery: {confirmation.estimated_delivery:%Y-%m-%d}")
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run a checkout through the wizard",
    )
    target = parser.add_mutually_exclusive_group()
    target.add_argument(
        "--url",
        help="Checkout service URL; runs in-process when neither --url nor --remote is given",
    )
    target.add_argument(
        "--remote",
        action="store_true",
        help=f"Run against CHECKOUT_API_URL ({settings.checkout_api_url})",
    )
    parser.add_argument("--email", default="user@test.com")
    parser.add_argument("--password", default="password123")
    parser.add_argument("--postcode", default="SW1A 1AA")
    parser.add_argument(
        "--shipping-method",
        choices=["standard", "express", "overnight"],
        default="standard",
    )
    parser.add_argument("--card", default="4242424242424242")
    parser.add_argument("--discount-code", help="Apply a discount code to the summary")
    parser.add_argument(
        "--no-latency",
        action="store_true",
        help="Skip the simulated network delay (in-process only)",
    )
    return parser


def service_url(args: argparse.Namespace) -> str | None:
    """URL of the checkout service to run against, None for in-process."""
    if args.url:
        return args.url
    if args.remote:
        return settings.checkout_api_url
    return None


async def main() -> int:
    """Main entry point."""
    args = build_parser().parse_args()
    url = service_url(args)

    configure_logging(level="WARNING", json_output=False)

    print("=" * 60)
    print("Checkout Wizard Demo")
    print("=" * 60)
    print(f"Target: {url or 'in-process'}")
    print()

    if url:
        async with CheckoutApiClient(
            base_url=url, timeout=settings.client_timeout_seconds
        ) as client:
            orchestrator = CheckoutOrchestrator(gateway=client, session_repo=SessionRepository())
            completed = await run_checkout(orchestrator, args)
    else:
        service = StepService.from_settings()
        if args.no_latency:
            service.latency = NoLatency()
        orchestrator = CheckoutOrchestrator(gateway=service, session_repo=SessionRepository())
        completed = await run_checkout(orchestrator, args)

    print("=" * 60)
    print("Checkout complete!" if completed else "Checkout stopped.")
    print("=" * 60)
    return 0 if completed else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
