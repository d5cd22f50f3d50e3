# services/rating.py - Incremental store rating aggregate
from tables.stores import Store

class RatingAggregator:
    """Keeps ``store.rating`` equal to the mean of its review ratings.

    Callers hold the store row lock (``StoreRepo.get_for_update``) inside the
    same transaction as the review insert/update/delete.
    """

    @staticmethod
    def on_create(store: Store, new_rating: int):
        total = store.rating * store.reviews
        store.reviews = store.reviews + 1
        store.rating = (total + new_rating) / store.reviews

    @staticmethod
    def on_update(store: Store, old_rating: int, new_rating: int):
        total = store.rating * store.reviews - old_rating + new_rating
        store.rating = total / store.reviews

    @staticmethod
    def on_delete(store: Store, old_rating: int):
        prior_reviews = store.reviews
        store.reviews = prior_reviews - 1
        if store.reviews > 0:
            store.rating = (store.rating * prior_reviews - old_rating) / store.reviews
        else:
            store.rating = 0.0
