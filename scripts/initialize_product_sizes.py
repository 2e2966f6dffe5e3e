#!/usr/bin/env python
"""Give every product without size rows the default XS-XL sizes.

Products that already have any size rows are left untouched. New rows
start with stock 0 and enabled, exactly as the admin size editor does.

Usage:
    # Show which products would be initialized
    python scripts/initialize_product_sizes.py --email admin@example.com --dry-run

    # Initialize them (password read from STOREFRONT_ADMIN_PASSWORD)
    python scripts/initialize_product_sizes.py --email admin@example.com
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from storefront.bootstrap import storefront_session
from storefront.core.sizes import DEFAULT_SIZES
from storefront.services.auth_service import AuthError
from storefront.services.backend_client import BackendError


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Initialize default sizes for unsized products")
    parser.add_argument(
        "--email",
        required=True,
        help="Staff account email",
    )
    parser.add_argument(
        "--password",
        default=os.environ.get("STOREFRONT_ADMIN_PASSWORD"),
        help="Staff account password (default: $STOREFRONT_ADMIN_PASSWORD)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List products that would be initialized without writing",
    )
    return parser.parse_args()


async def main() -> int:
    """Main entry point."""
    args = parse_args()

    if not args.password:
        print("Error: --password or STOREFRONT_ADMIN_PASSWORD is required")
        return 1

    async with storefront_session() as storefront:
        try:
            actor = await storefront.auth.sign_in(args.email, args.password)
        except (AuthError, BackendError) as e:
            print(f"Error: sign-in failed: {e}")
            return 1

        try:
            if not actor.is_staff:
                print("Error: account is not admin or manager")
                return 1

            products = await storefront.catalog.list_products(include_inactive=True)
            pending = [
                product
                for product in products
                if not await storefront.inventory.list_sizes(product.id)
            ]

            print(f"{len(pending)} of {len(products)} products have no sizes")
            for product in pending:
                print(f"  {product.slug}")

            if args.dry_run or not pending:
                return 0

            for product in pending:
                await storefront.inventory.initialize_defaults(product.id, actor)
        except BackendError as e:
            print(f"Error: backend request failed: {e.message}")
            return 1
        finally:
            await storefront.auth.sign_out()

    print(f"\nInitialized sizes {', '.join(DEFAULT_SIZES)} for {len(pending)} products")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
