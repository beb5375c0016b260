"""In-memory post-processing of result rows (sort, filter, group, flatten)."""

from functools import cmp_to_key
from typing import Any, Callable

Row = dict[str, Any]


def _compare_values(a: Any, b: Any) -> int:
    if a is None and b is None:
        return 0
    if a is None:
        return -1
    if b is None:
        return 1
    if type(a) is not type(b) or not isinstance(a, (str, int, float, bool)):
        a, b = str(a), str(b)
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


class ResultProcessor:
    """Stateless helpers over lists of result rows.

    None of the methods mutate the input list.
    """

    @staticmethod
    def sort_by(rows: list[Row], field: str, ascending: bool = True) -> list[Row]:
        """Stable sort on ``field``; missing/None values sort first.

        Values of different types are compared by their string form.
        """
        key = cmp_to_key(lambda x, y: _compare_values(x.get(field), y.get(field)))
        if ascending:
            return sorted(rows, key=key)
        # reverse=True keeps equal elements in input order
        return sorted(rows, key=key, reverse=True)

    @staticmethod
    def filter(rows: list[Row], predicate: Callable[[Row], bool]) -> list[Row]:
        return [row for row in rows if predicate(row)]

    @staticmethod
    def transform(rows: list[Row], fn: Callable[[Row], Row]) -> list[Row]:
        return [fn(row) for row in rows]

    @staticmethod
    def aggregate(
        rows: list[Row],
        group_key: str,
        reducer: Callable[[list[Row]], Row],
    ) -> list[Row]:
        """Group rows by ``str(row[group_key])`` and reduce each group.

        Rows without the key fall into the ``""`` group. Groups come out
        in first-seen order.
        """
        groups: dict[str, list[Row]] = {}
        for row in rows:
            key = str(row[group_key]) if group_key in row else ""
            groups.setdefault(key, []).append(row)
        return [reducer(group) for group in groups.values()]

    @staticmethod
    def flatten(rows: list[Row], separator: str = ".") -> list[Row]:
        separator = separator or "."
        flattened = []
        for row in rows:
            flat: Row = {}
            _flatten_into(row, "", separator, flat)
            flattened.append(flat)
        return flattened


def _flatten_into(source: Row, prefix: str, separator: str, target: Row) -> None:
    for key, value in source.items():
        new_key = f"{prefix}{separator}{key}" if prefix else str(key)
        if isinstance(value, dict):
            _flatten_into(value, new_key, separator, target)
        else:
            target[new_key] = value
