"""
Unit tests for in-memory result post-processing.

Run with: pytest tests/test_query/test_processor.py -v
"""

from codegraph.query.processor import ResultProcessor


class TestSortBy:

    def test_ascending_with_missing_values_first(self):
        rows = [{"n": "b"}, {"n": None}, {"n": "a"}, {}]
        result = ResultProcessor.sort_by(rows, "n")
        assert [r.get("n") for r in result] == [None, None, "a", "b"]

    def test_descending(self):
        rows = [{"n": 1}, {"n": 3}, {"n": 2}]
        result = ResultProcessor.sort_by(rows, "n", ascending=False)
        assert [r["n"] for r in result] == [3, 2, 1]

    def test_stable_in_both_directions(self):
        rows = [
            {"k": 1, "id": "first"},
            {"k": 0, "id": "x"},
            {"k": 1, "id": "second"},
        ]
        up = ResultProcessor.sort_by(rows, "k")
        down = ResultProcessor.sort_by(rows, "k", ascending=False)

        assert [r["id"] for r in up] == ["x", "first", "second"]
        assert [r["id"] for r in down] == ["first", "second", "x"]

    def test_mixed_types_compare_as_text(self):
        rows = [{"v": "10"}, {"v": 9}]
        result = ResultProcessor.sort_by(rows, "v")
        assert [r["v"] for r in result] == ["10", 9]

    def test_input_not_mutated(self):
        rows = [{"n": 2}, {"n": 1}]
        ResultProcessor.sort_by(rows, "n")
        assert rows == [{"n": 2}, {"n": 1}]


class TestFilterTransform:

    def test_filter(self):
        rows = [{"n": 1}, {"n": 2}, {"n": 3}]
        assert ResultProcessor.filter(rows, lambda r: r["n"] > 1) == [{"n": 2}, {"n": 3}]

    def test_transform(self):
        rows = [{"n": 1}, {"n": 2}]
        assert ResultProcessor.transform(rows, lambda r: {"m": r["n"] * 10}) == [
            {"m": 10},
            {"m": 20},
        ]


class TestAggregate:

    def test_groups_in_first_seen_order(self):
        rows = [
            {"pkg": "b", "n": 1},
            {"pkg": "a", "n": 2},
            {"pkg": "b", "n": 3},
            {"n": 4},
        ]
        result = ResultProcessor.aggregate(
            rows,
            "pkg",
            lambda group: {"pkg": group[0].get("pkg", ""), "total": sum(r["n"] for r in group)},
        )
        assert result == [
            {"pkg": "b", "total": 4},
            {"pkg": "a", "total": 2},
            {"pkg": "", "total": 4},
        ]

    def test_keys_grouped_by_string_form(self):
        rows = [{"k": 1}, {"k": "1"}]
        result = ResultProcessor.aggregate(rows, "k", lambda group: {"count": len(group)})
        assert result == [{"count": 2}]


class TestFlatten:

    def test_nested_keys_joined(self):
        rows = [{"f": {"name": "Run", "loc": {"line": 3}}, "n": 1}]
        assert ResultProcessor.flatten(rows) == [{"f.name": "Run", "f.loc.line": 3, "n": 1}]

    def test_custom_separator(self):
        rows = [{"a": {"b": 1}}]
        assert ResultProcessor.flatten(rows, separator="_") == [{"a_b": 1}]

    def test_lists_are_left_alone(self):
        rows = [{"a": [{"b": 1}]}]
        assert ResultProcessor.flatten(rows) == [{"a": [{"b": 1}]}]
