"""Test helper utilities for PitchMatch tests."""

from .factories import (
    USER_ID,
    make_contact,
    make_opportunity,
    make_pool,
    make_template,
    seed_campaign,
)

__all__ = [
    "USER_ID",
    "make_contact",
    "make_opportunity",
    "make_pool",
    "make_template",
    "seed_campaign",
]
