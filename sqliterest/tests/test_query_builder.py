import pytest

from sqliterest.domain.paging import PageSpec
from sqliterest.errors import InvalidColumn
from sqliterest.repository import query_builder as qb


def test_no_filters_no_where():
    assert qb.build_where() == ("", [])
    assert qb.build_where({}, "") == ("", [])
    assert qb.build_where({}, "   ") == ("", [])


def test_filters_sorted_and_bound():
    where, params = qb.build_where({"qty": "3", "name": "A"})
    assert where == " WHERE name = ? AND qty = ?"
    assert params == ["A", "3"]


def test_raw_filter_alone_and_combined():
    where, params = qb.build_where(None, "price > 5")
    assert where == " WHERE (price > 5)"
    assert params == []

    where, params = qb.build_where({"name": "A"}, "price > 5 OR qty = 0")
    assert where == " WHERE name = ? AND (price > 5 OR qty = 0)"
    assert params == ["A"]


def test_filter_keys_are_sanitized():
    where, params = qb.build_where({"name = name OR 1=1 --": "x"})
    assert where == " WHERE namenameOR11 = ?"
    assert params == ["x"]


def test_count_and_list_sql():
    where, params = qb.build_where({"name": "A"})
    assert qb.count_rows("Product", where, params) == (
        "SELECT COUNT(*) FROM Product WHERE name = ?",
        ["A"],
    )
    sql, p = qb.list_rows("Product", PageSpec(page=3, per_page=10, sort="price", order="desc"), where, params)
    assert sql == "SELECT rowid, * FROM Product WHERE name = ? ORDER BY price DESC LIMIT ? OFFSET ?"
    assert p == ["A", 10, 20]


def test_list_sql_defaults():
    sql, p = qb.list_rows("Product", PageSpec(per_page=5000))
    assert sql == "SELECT rowid, * FROM Product ORDER BY rowid ASC LIMIT ? OFFSET ?"
    assert p == [1000, 0]


def test_insert_keeps_field_order():
    sql, p = qb.insert_row("Product", {"price": 9.99, "name": "Widget"})
    assert sql == "INSERT INTO Product (price, name) VALUES (?, ?)"
    assert p == [9.99, "Widget"]


def test_update_sorts_fields():
    sql, p = qb.update_row("Product", 7, {"qty": 2, "name": "B"})
    assert sql == "UPDATE Product SET name = ?, qty = ? WHERE rowid = ?"
    assert p == ["B", 2, 7]


def test_delete_sql():
    assert qb.delete_row("Product", 4) == ("DELETE FROM Product WHERE rowid = ?", [4])


def test_identifiers_never_carry_injection():
    sql, p = qb.insert_row("P;DROP TABLE x", {"a b": "1); DROP TABLE y; --"})
    assert sql == "INSERT INTO PDROPTABLEx (ab) VALUES (?)"
    assert p == ["1); DROP TABLE y; --"]
    assert qb.table_info("t');--") == ("PRAGMA table_info(t)", [])


def test_catalog_lookups_bind_names():
    sql, p = qb.table_lookup("Product")
    assert "name = ?" in sql and p == ["Product"]
    sql, p = qb.list_tables()
    assert sql.endswith("ORDER BY type, name") and p == []


@pytest.mark.parametrize("key", ["?-", "", ";;", "表"])
def test_column_names_that_sanitize_to_nothing_are_rejected(key):
    with pytest.raises(InvalidColumn) as ei:
        qb.build_where({key: "x"})
    assert ei.value.name == key
    with pytest.raises(InvalidColumn):
        qb.insert_row("Product", {"name": "A", key: 1})
    with pytest.raises(InvalidColumn):
        qb.update_row("Product", 1, {key: 1})
