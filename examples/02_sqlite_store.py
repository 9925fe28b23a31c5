"""
Example 02: SQLite-backed caches with conditions

Comment counts on posts, once for all comments and once for visible ones
only, kept in a SQLite file through SQLRecordStore.
"""

import sqlite3
import tempfile

from aggregate_cache import (
    AggregateCache,
    ConnectionConfig,
    ConnectionManager,
    Entity,
    Repository,
    RuleRegistry,
    Schema,
    SQLRecordStore,
    rule,
)


def main():
    db_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    db_path = db_file.name
    db_file.close()

    conn = sqlite3.connect(db_path)
    conn.execute("""
        CREATE TABLE posts (
            id INTEGER PRIMARY KEY,
            title TEXT NOT NULL,
            comment_count INTEGER NOT NULL DEFAULT 0,
            visible_count INTEGER NOT NULL DEFAULT 0
        )
    """)
    conn.execute("""
        CREATE TABLE comments (
            id INTEGER PRIMARY KEY,
            post_id INTEGER NOT NULL REFERENCES posts(id),
            visible INTEGER NOT NULL DEFAULT 1
        )
    """)
    conn.execute("INSERT INTO posts (id, title) VALUES (1, 'Hello'), (2, 'World')")
    conn.commit()
    conn.close()

    manager = ConnectionManager(ConnectionConfig(driver="sqlite", database=db_path, pool_size=1))
    store = SQLRecordStore(manager, tables={"Comments": "comments", "Posts": "posts"})

    schema = Schema().belongs_to("Comments", "Posts", foreign_key="post_id")
    registry = RuleRegistry(strict=True)
    registry.register(
        "Comments",
        [
            rule("id").on("Posts").count("comment_count"),
            rule("id").on("Posts").count("visible_count").where(visible=1),
        ],
    )
    repo = Repository(store, AggregateCache(registry, schema, store))

    repo.save(Entity("Comments", {"post_id": 1}))
    hidden = Entity("Comments", {"post_id": 1, "visible": 0})
    repo.save(hidden)
    print("Post 1:", store.get("Posts", 1))

    # Move the hidden comment to post 2: both posts are recomputed
    hidden.set("post_id", 2)
    report = repo.save(hidden)
    print("Updated parents:", [(u.target_type, u.parent_id) for u in report.updated])
    print("Post 1:", store.get("Posts", 1))
    print("Post 2:", store.get("Posts", 2))

    manager.close_pool()


if __name__ == "__main__":
    main()
