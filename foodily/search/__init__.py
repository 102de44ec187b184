"""
Restaurant discovery.

Responsibilities:
- Maps-grounded search, restaurant details and the dining concierge.
- Split AI answers into an intro and bullet picks linked to Maps citations.
- Cuisine labels from restaurant write-ups.
- Google Places lookups and per-user search history.
"""
