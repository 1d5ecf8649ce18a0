#!/usr/bin/env python3
"""
Review Seed Script

Submits sample reviews through the submission service, so every seeded
review carries real hashes and a submission record.

USAGE:
    # From the project root
    python scripts/seed_reviews.py

    # Seed the JSON store instead of the database
    REVIEW_STORE_BACKEND=json python scripts/seed_reviews.py

Publication is disabled while seeding; no network calls are made.
Reviews that already exist for a (wallet, product) pair are skipped.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from reviewchain.config import get_settings
from reviewchain.exceptions import DuplicateReviewError
from reviewchain.services.events import EventChannel, register_default_subscribers
from reviewchain.services.reviews import ClientInfo, ReviewSubmissionService
from reviewchain.stores import create_review_store

SAMPLE_REVIEWS = [
    {
        "rating": 5,
        "text": "Solid build quality and the battery easily lasts two days.",
        "productId": "headphones-x200",
        "walletAddress": "0x742d35Cc6634C0532925a3b844Bc454e4438f44e",
    },
    {
        "rating": 4,
        "text": "Great sound, the case feels a little cheap.",
        "productId": "headphones-x200",
        "walletAddress": "0x8ba1f109551bD432803012645Ac136ddd64DBA72",
    },
    {
        "rating": 2,
        "text": "Stopped charging after a month.",
        "productId": "headphones-x200",
        "walletAddress": "0xAb5801a7D398351b8bE11C439e05C5B3259aeC9B",
    },
    {
        "rating": 5,
        "text": "Exactly as described. Fast shipping.",
        "productId": "desk-lamp-01",
        "walletAddress": "0x742d35Cc6634C0532925a3b844Bc454e4438f44e",
    },
    {
        "rating": 3,
        "text": "Bright enough, but the arm is stiff.",
        "productId": "desk-lamp-01",
        "walletAddress": "0xAb5801a7D398351b8bE11C439e05C5B3259aeC9B",
    },
]


def main() -> None:
    """Run the seeding process."""
    settings = get_settings()

    print("=" * 50)
    print("Review Seed Script")
    print("=" * 50)
    print(f"Store backend: {settings.review_store_backend}")

    service = ReviewSubmissionService(
        store=create_review_store(settings),
        events=register_default_subscribers(EventChannel()),
        publication_enabled=False,
    )
    client_info = ClientInfo(submission_method="seed")

    created = 0
    for data in SAMPLE_REVIEWS:
        try:
            result = service.submit(data, client_info=client_info)
        except DuplicateReviewError:
            print(f"  skipped {data['productId']} / {data['walletAddress']} (already reviewed)")
            continue
        created += 1
        print(f"  {result.review_id}  {data['productId']}  hash={result.review_hash[:16]}...")

    print("=" * 50)
    print(f"Seeding complete! {created} review(s) created.")
    print("=" * 50)


if __name__ == "__main__":
    main()
