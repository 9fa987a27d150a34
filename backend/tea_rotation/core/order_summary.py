"""Order Summary — breakdown of what the assignee has to make for a session.

Invariants:
    - All functions are PURE: no IO, no async, no DB
    - Excused orders ARE counted here (they only skip fairness accounting)
    - Drink names are whitespace-trimmed before grouping
    - Group order follows first appearance in the input
"""

from dataclasses import dataclass

from tea_rotation.core.domain_types import SugarLevel

_SUGAR_PHRASES = {
    SugarLevel.NO_SUGAR.value: "with no sugar",
    SugarLevel.LESS.value: "with less sugar",
}


@dataclass(frozen=True)
class OrderLine:
    drink_type: str
    sugar_level: str
    user_name: str | None = None
    is_excused: bool = False


def count_by_drink(lines: list[OrderLine]) -> dict[str, dict[str, int]]:
    """{drink: {sugar_level: count}}."""
    counts: dict[str, dict[str, int]] = {}
    for line in lines:
        per_sugar = counts.setdefault(line.drink_type.strip(), {})
        per_sugar[line.sugar_level] = per_sugar.get(line.sugar_level, 0) + 1
    return counts


def names_by_order(lines: list[OrderLine]) -> dict[str, list[str]]:
    """{"Tea (Less)": ["Alice", "Bob"]} — orders without a user still create the key."""
    names: dict[str, list[str]] = {}
    for line in lines:
        key = f"{line.drink_type.strip()} ({line.sugar_level})"
        bucket = names.setdefault(key, [])
        if line.user_name:
            bucket.append(line.user_name)
    return names


def _describe(drink: str, sugar: str, count: int) -> str:
    drink_text = drink if count == 1 else f"{drink}s"
    sugar_text = _SUGAR_PHRASES.get(sugar, "with normal sugar")
    return f"{count} {drink_text} {sugar_text}"


def order_sentence(lines: list[OrderLine]) -> str:
    """Readable instruction, e.g. 'Please make 2 Teas with less sugar and 1 Coffee with normal sugar.'"""
    items = [
        _describe(drink, sugar, count)
        for drink, per_sugar in count_by_drink(lines).items()
        for sugar, count in per_sugar.items()
    ]
    if not items:
        return "No orders to make."
    if len(items) == 1:
        return f"Please make {items[0]}."
    if len(items) == 2:
        return f"Please make {items[0]} and {items[1]}."
    return f"Please make {', '.join(items[:-1])}, and {items[-1]}."
