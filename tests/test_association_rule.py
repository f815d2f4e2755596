import pytest

from aprioriminer.AssociationRule import AssociationRule
from aprioriminer.Errors import ParseError


def test_parse_reverse_line():
    rule = AssociationRule.parse_line("foo <- bar baz bangle (66.7/4, 75.0)")
    assert rule.antecedent == ('bar', 'baz', 'bangle')
    assert rule.consequent == 'foo'
    assert rule.support == 66.7
    assert rule.num_antecedent_transactions == 4
    assert rule.confidence == 75.0


def test_parse_forward_line():
    rule = AssociationRule.parse_line("bar baz bangle -> foo (66.7/4, 75.0)\n")
    assert rule == AssociationRule(('bar', 'baz', 'bangle'), 'foo', 66.7, 4, 75.0)


def test_parse_line_without_count():
    rule = AssociationRule.parse_line("foo <- bar (12.5, 100.0)")
    assert rule.num_antecedent_transactions is None
    assert rule.to_reverse_s() == "foo <- bar (12.5, 100.0)"


def test_parse_multi_item_consequent():
    rule = AssociationRule.parse_line("a -> b c (80.0/4, 75.0)")
    assert rule.consequent == ('b', 'c')
    assert rule.consequent_items == ('b', 'c')
    assert rule.size == 3


@pytest.mark.parametrize("line", [
    "",
    "foo bar (66.7/4, 75.0)",
    "foo <- bar (66.7/4)",
    "foo <- bar (66.7/x, 75.0)",
    "foo <- (66.7/4, 75.0)",
    "foo <- bar (66/4, 75.0)",
])
def test_parse_malformed_lines(line):
    with pytest.raises(ParseError) as info:
        AssociationRule.parse_line(line, 7)
    assert info.value.line_no == 7
    assert info.value.line == line


def test_render_both_orientations():
    rule = AssociationRule(('cheese',), 'apple', 50.0, 3, 100.0)
    assert rule.to_s() == "cheese -> apple (50.0/3, 100.0)"
    assert str(rule) == rule.to_s()
    assert rule.to_reverse_s() == "apple <- cheese (50.0/3, 100.0)"


def test_percentages_are_rounded():
    rule = AssociationRule(('doritos',), 'beer', 100.0 * 3 / 6, 3, 100.0 * 2 / 3)
    assert rule.confidence == 66.7
    assert rule.to_s() == "doritos -> beer (50.0/3, 66.7)"


def test_round_trip():
    rule = AssociationRule(('bar', 'baz'), ('foo', 'qux'), 33.3, 2, 100.0, lift=3.0)
    assert AssociationRule.parse_line(rule.to_s()) == rule
    assert AssociationRule.parse_line(rule.to_reverse_s()) == rule


def test_equality_ignores_derived_values():
    plain = AssociationRule(('beer',), 'doritos', 33.3, 2, 100.0)
    measured = AssociationRule(('beer',), 'doritos', 33.3, 2, 100.0, support_count=2, lift=2.0, p_value=0.08)
    assert plain == measured
    assert plain != AssociationRule(('beer',), 'doritos', 33.3, 3, 100.0)


def test_from_lines_keeps_good_lines():
    lines = [
        "apple <- cheese (50.0/3, 100.0)\n",
        "\n",
        "this is not a rule\n",
        "doritos <- beer (33.3/2, 100.0)\n",
    ]
    rules, errors = AssociationRule.from_lines(lines)
    assert [rule.to_s() for rule in rules] == [
        "cheese -> apple (50.0/3, 100.0)",
        "beer -> doritos (33.3/2, 100.0)",
    ]
    assert len(errors) == 1
    assert errors[0].line_no == 3
    assert errors[0].line == "this is not a rule"


def test_from_file(tmp_path):
    path = tmp_path / "rules.txt"
    path.write_text("foo <- bar baz bangle (66.7/4, 75.0)\nbroken\n", encoding='utf-8')
    rules, errors = AssociationRule.from_file(path)
    assert rules == [AssociationRule(('bar', 'baz', 'bangle'), 'foo', 66.7, 4, 75.0)]
    assert [err.line_no for err in errors] == [2]


def test_to_dict():
    rule = AssociationRule(('beer',), 'doritos', 33.3, 2, 100.0, support_count=2, lift=2.0)
    assert rule.to_dict() == {
        'antecedent': ['beer'],
        'consequent': ['doritos'],
        'support': 33.3,
        'antecedent_transactions': 2,
        'support_count': 2,
        'confidence': 100.0,
        'lift': 2.0,
        'value': None,
        'p_value': None,
    }
