"""
Unit tests for the store rating aggregator.
"""

import pytest
from pymongo.errors import DuplicateKeyError

from storerating.models.rating import Rating
from storerating.services.rating import recompute_store_rating, round_rating


def test_round_rating_half_up():
    assert round_rating(4.25) == 4.3
    assert round_rating(2.45) == 2.5
    assert round_rating(3.0) == 3.0
    assert round_rating(10 / 3) == 3.3
    assert round_rating(11 / 3) == 3.7


async def add_rating(db, store_id, user_id, value):
    await db.ratings.insert_one(Rating(user_id=user_id, store_id=store_id, rating=value).model_dump())


async def test_recompute_without_ratings_resets_to_zero(db, make_store):
    store = await make_store()
    await db.stores.update_one({"id": store.id}, {"$set": {"average_rating": 4.0, "total_ratings": 3}})

    aggregate = await recompute_store_rating(db, store.id)

    assert aggregate.average_rating == 0
    assert aggregate.total_ratings == 0
    saved = await db.stores.find_one({"id": store.id})
    assert saved["average_rating"] == 0
    assert saved["total_ratings"] == 0


async def test_recompute_averages_and_persists(db, make_store):
    store = await make_store()
    for user_id, value in (("u1", 5), ("u2", 4), ("u3", 4), ("u4", 4)):
        await add_rating(db, store.id, user_id, value)

    aggregate = await recompute_store_rating(db, store.id)

    # 17 / 4 = 4.25 rounds half-up
    assert aggregate.average_rating == 4.3
    assert aggregate.total_ratings == 4
    saved = await db.stores.find_one({"id": store.id})
    assert saved["average_rating"] == 4.3
    assert saved["total_ratings"] == 4


async def test_recompute_ignores_other_stores(db, make_store):
    store = await make_store()
    other = await make_store()
    await add_rating(db, store.id, "u1", 2)
    await add_rating(db, other.id, "u1", 5)

    aggregate = await recompute_store_rating(db, store.id)

    assert aggregate.average_rating == 2.0
    assert aggregate.total_ratings == 1


async def test_recompute_missing_store_is_noop(db):
    assert await recompute_store_rating(db, "does-not-exist") is None
    assert await db.stores.count_documents({}) == 0


async def test_rating_pair_is_unique(db, make_store):
    store = await make_store()
    await add_rating(db, store.id, "u1", 3)
    with pytest.raises(DuplicateKeyError):
        await add_rating(db, store.id, "u1", 4)
