"""
Example 01: Cached comment ratings on posts

Posts keep the average and best rating of their comments. The in-memory
store stands in for a real database.
"""

from aggregate_cache import (
    AggregateCache,
    Entity,
    InMemoryStore,
    Repository,
    RuleRegistry,
    Schema,
    configure_logging,
)


def main():
    configure_logging(level="DEBUG")

    store = InMemoryStore()
    store.insert("posts", {"id": 1, "title": "Hello", "average_rating": 0, "best_rating": 0})

    schema = Schema().belongs_to("Comments", "Posts", foreign_key="post_id", target="posts")

    registry = RuleRegistry()
    registry.register(
        "Comments",
        [{"field": "rating", "model": "Posts", "avg": "average_rating", "max": "best_rating"}],
    )

    repo = Repository(store, AggregateCache(registry, schema, store))

    repo.save(Entity("Comments", {"post_id": 1, "rating": 3}))
    five = Entity("Comments", {"post_id": 1, "rating": 5})
    repo.save(five)
    repo.save(Entity("Comments", {"post_id": 1, "rating": 4}))
    print("After three comments:", store.get("posts", 1))

    repo.delete(five)
    print("After deleting the 5:", store.get("posts", 1))


if __name__ == "__main__":
    main()
