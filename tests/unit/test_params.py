"""Unit tests for parameter normalizer."""

from __future__ import annotations

from aggregate_cache.core.params import normalize_params


class TestNormalizeParams:
    def test_named_passthrough(self) -> None:
        sql = "SELECT AVG(rating) AS avg_value FROM comments WHERE post_id = :w0 GROUP BY post_id"
        assert normalize_params(sql, "named") == sql

    def test_pyformat_conversion(self) -> None:
        sql = "SELECT 1 FROM posts WHERE id = :record_id LIMIT 1"
        expected = "SELECT 1 FROM posts WHERE id = %(record_id)s LIMIT 1"
        assert normalize_params(sql, "pyformat") == expected

    def test_update_statement(self) -> None:
        sql = "UPDATE posts SET average_rating = :v0, best_rating = :v1 WHERE id = :record_id"
        expected = (
            "UPDATE posts SET average_rating = %(v0)s, best_rating = %(v1)s "
            "WHERE id = %(record_id)s"
        )
        assert normalize_params(sql, "pyformat") == expected

    def test_typecast_exclusion(self) -> None:
        sql = "SELECT AVG(rating)::float FROM comments WHERE post_id = :w0"
        expected = "SELECT AVG(rating)::float FROM comments WHERE post_id = %(w0)s"
        assert normalize_params(sql, "pyformat") == expected

    def test_string_literal_exclusion(self) -> None:
        sql = "SELECT * FROM comments WHERE body = ':not_a_param' AND post_id = :w0"
        expected = "SELECT * FROM comments WHERE body = ':not_a_param' AND post_id = %(w0)s"
        assert normalize_params(sql, "pyformat") == expected

    def test_no_params(self) -> None:
        sql = "SELECT COUNT(rating) FROM comments WHERE 1 = 1 GROUP BY post_id"
        assert normalize_params(sql, "pyformat") == sql
