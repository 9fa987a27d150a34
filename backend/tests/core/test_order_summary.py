"""Order Summary — tests for the pure drink breakdown and instruction sentence.

Tests cover:
    - counts group by trimmed drink, then sugar level
    - excused orders still appear in the breakdown
    - names grouped under "drink (sugar)"
    - sentence phrasing for 0, 1, 2 and 3+ items, pluralisation, sugar phrases
"""

from tea_rotation.core.order_summary import (
    OrderLine, count_by_drink, names_by_order, order_sentence,
)


def test_counts_group_by_trimmed_drink_and_sugar():
    lines = [
        OrderLine("Tea", "Less", "Alice"),
        OrderLine(" Tea ", "Less", "Bob"),
        OrderLine("Tea", "Normal", "Carol"),
        OrderLine("Coffee", "No Sugar", "Dan"),
    ]
    assert count_by_drink(lines) == {
        "Tea": {"Less": 2, "Normal": 1},
        "Coffee": {"No Sugar": 1},
    }


def test_excused_orders_are_counted():
    lines = [
        OrderLine("Tea", "Normal", "Alice"),
        OrderLine("Tea", "Normal", "Carol", is_excused=True),
    ]
    assert count_by_drink(lines) == {"Tea": {"Normal": 2}}
    assert names_by_order(lines) == {"Tea (Normal)": ["Alice", "Carol"]}


def test_names_skip_missing_users_but_keep_key():
    lines = [OrderLine("Lemon Tea", "Less", None)]
    assert names_by_order(lines) == {"Lemon Tea (Less)": []}


def test_sentence_for_no_orders():
    assert order_sentence([]) == "No orders to make."


def test_sentence_for_single_item():
    assert order_sentence([OrderLine("Tea", "Normal")]) == (
        "Please make 1 Tea with normal sugar."
    )


def test_sentence_pluralises_and_joins_two_items():
    lines = [
        OrderLine("Tea", "Less"),
        OrderLine("Tea", "Less"),
        OrderLine("Coffee", "No Sugar"),
    ]
    assert order_sentence(lines) == (
        "Please make 2 Teas with less sugar and 1 Coffee with no sugar."
    )


def test_sentence_uses_oxford_comma_for_three_items():
    lines = [
        OrderLine("Tea", "Normal"),
        OrderLine("Tea", "Less"),
        OrderLine("Black Coffee", "No Sugar"),
    ]
    assert order_sentence(lines) == (
        "Please make 1 Tea with normal sugar, 1 Tea with less sugar, "
        "and 1 Black Coffee with no sugar."
    )


def test_unknown_sugar_level_reads_as_normal():
    assert order_sentence([OrderLine("Tea", "Extra")]) == (
        "Please make 1 Tea with normal sugar."
    )
