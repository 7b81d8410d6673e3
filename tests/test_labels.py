import pytest

from folddb.labels import MAX_LEVEL, SecurityLabel


def test_same_level_flows_to_self():
    a = SecurityLabel(1, "internal")
    b = SecurityLabel(1, "internal")
    assert a.flows_to(b)
    assert b.flows_to(a)


def test_lower_flows_to_higher():
    low = SecurityLabel(0, "public")
    high = SecurityLabel(3, "classified")
    assert low.flows_to(high)


def test_higher_does_not_flow_to_lower():
    low = SecurityLabel(0, "public")
    high = SecurityLabel(3, "classified")
    assert not high.flows_to(low)


def test_lattice_ordering_is_transitive():
    a = SecurityLabel(0, "public")
    b = SecurityLabel(1, "internal")
    c = SecurityLabel(2, "secret")
    assert a.flows_to(b)
    assert b.flows_to(c)
    assert a.flows_to(c)


def test_ordering_uses_level_not_category():
    a = SecurityLabel(1, "finance")
    b = SecurityLabel(1, "health")
    assert a.flows_to(b)
    assert b.flows_to(a)


def test_partial_ord_consistent_with_flows_to():
    low = SecurityLabel(0, "public")
    high = SecurityLabel(5, "top_secret")
    assert low < high
    assert low.flows_to(high)
    assert not high.flows_to(low)


def test_level_zero_flows_to_everything():
    zero = SecurityLabel(0, "public")
    for level in range(10):
        assert zero.flows_to(SecurityLabel(level, "any"))


def test_max_level_flows_to_nothing_below():
    top = SecurityLabel(MAX_LEVEL, "top")
    below = SecurityLabel(MAX_LEVEL - 1, "almost_top")
    assert not top.flows_to(below)
    assert top.flows_to(top)


def test_equality_includes_category():
    a = SecurityLabel(1, "finance")
    b = SecurityLabel(1, "health")
    assert not a == b
    assert a <= b and b <= a


def test_sorting_by_level():
    labels = [SecurityLabel(3, "c"), SecurityLabel(0, "a"), SecurityLabel(2, "b")]
    assert [label.level for label in sorted(labels)] == [0, 2, 3]


@pytest.mark.parametrize("level", [-1, MAX_LEVEL + 1])
def test_level_out_of_range(level):
    with pytest.raises(ValueError):
        SecurityLabel(level, "bad")