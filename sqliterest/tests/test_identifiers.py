from sqliterest.domain.identifiers import sanitize_identifier


def test_strips_disallowed_and_keeps_order():
    assert sanitize_identifier("Order;DROP") == "OrderDROP"
    assert sanitize_identifier("my table--") == "mytable"
    assert sanitize_identifier("a'b\"c`d[e]") == "abcde"


def test_keeps_allowed_characters_untouched():
    assert sanitize_identifier("Product_2024") == "Product_2024"
    assert sanitize_identifier("_x9") == "_x9"


def test_non_ascii_letters_are_removed():
    assert sanitize_identifier("Prodüct") == "Prodct"
    assert sanitize_identifier("表") == ""


def test_empty_inputs():
    assert sanitize_identifier("") == ""
    assert sanitize_identifier(";--") == ""
    assert sanitize_identifier(None) == ""
