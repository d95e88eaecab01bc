"""ISP billing management CLI.

Creates and drops the billing schema and seeds a starter set of gateways.

Usage:
    python src/manage.py setup-db         # Create all tables
    python src/manage.py drop-db          # Drop all tables
    python src/manage.py seed-gateways    # Register the default gateways
"""

import argparse
import json
import sys

DEFAULT_GATEWAYS = [
    {
        "gateway_name": "mpesa",
        "gateway_type": "mpesa",
        "provider": "Safaricom",
        "processing_fee_percent": 1.0,
        "processing_fee_fixed": 0.0,
        "supported_currencies": ["KES"],
        "configuration": {"shortcode": "174379", "environment": "sandbox"},
    },
    {
        "gateway_name": "stripe",
        "gateway_type": "stripe",
        "provider": "Stripe",
        "processing_fee_percent": 2.9,
        "processing_fee_fixed": 30.0,
        "supported_currencies": ["KES", "USD"],
    },
    {
        "gateway_name": "bank_transfer",
        "gateway_type": "bank_transfer",
        "provider": "Bank Transfer",
        "supported_currencies": ["KES", "USD"],
        "configuration": {"bank_name": "Equity Bank", "account_number": "0123456789"},
    },
]


def setup_database():
    """Create the billing database schema."""
    from billing.domain import billing
    from billing.utils.db import setup_db

    print("Initializing billing domain...")
    billing.init()
    print("Creating billing database schema...")
    providers = setup_db(billing)
    if not providers:
        print("  No relational database configured (set PROTEAN_ENV=production).")
    print("Done.")


def drop_database():
    """Drop the billing database schema."""
    from billing.domain import billing
    from billing.utils.db import drop_db

    print("Initializing billing domain...")
    billing.init()
    print("Dropping billing database schema...")
    drop_db(billing)
    print("Done.")


def seed_gateways():
    """Register the default gateways, skipping any that already exist."""
    from billing.domain import billing
    from billing.gateway_config.management import RegisterGateway
    from protean.exceptions import ValidationError
    from protean.utils.globals import current_domain

    billing.init()
    with billing.domain_context():
        for gateway in DEFAULT_GATEWAYS:
            fields = dict(gateway)
            fields["supported_currencies"] = json.dumps(fields.get("supported_currencies", ["KES"]))
            fields["configuration"] = json.dumps(fields.get("configuration", {}))
            try:
                current_domain.process(RegisterGateway(**fields), asynchronous=False)
            except ValidationError as exc:
                print(f"  {gateway['gateway_name']}: skipped ({exc})")
                continue
            print(f"  {gateway['gateway_name']}: registered")
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="ISP billing management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("seed-gateways", help="Register the default payment gateways")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "seed-gateways":
        seed_gateways()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
