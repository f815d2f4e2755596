from itertools import combinations

import pytest

from aprioriminer.Errors import InvariantViolation, MiningCancelled
from aprioriminer.ItemsetTree import ItemsetTree, ROOT
from aprioriminer.TransactionDB import TransactionDB

from conftest import random_transactions


def build_tree(db, min_count=1, max_count=None, max_items=None, n_jobs=1):
    if max_count is None:
        max_count = db.total_count()
    return ItemsetTree(db, min_count, max_count, max_items, n_jobs).build()


def brute_force_counts(db):
    counts = {}
    n_items = len(db.catalog)
    for size in range(1, n_items + 1):
        for itemset in combinations(range(n_items), size):
            count = sum(1 for t in db.transactions if set(itemset) <= set(t))
            if count:
                counts[itemset] = count
    return counts


def test_market_basket_tree(market_db):
    tree = build_tree(market_db)
    assert tree.height == 2
    assert [tree.itemset_of(h) for h in tree.levels[0]] == [(0,), (1,), (2,), (3,)]
    assert [tree.itemset_of(h) for h in tree.levels[1]] == [(0, 1), (1, 2), (2, 3)]
    assert [tree.nodes[h].count for h in tree.levels[1]] == [2, 1, 3]
    assert tree.count_of((2, 3)) == 3
    assert tree.count_of(()) == 6


def test_arena_structure(market_db):
    tree = build_tree(market_db)
    for handle, node in enumerate(tree.nodes):
        items = [tree.nodes[child].item for child in node.children]
        assert items == sorted(items)
        for child in node.children:
            assert tree.nodes[child].parent == handle
            assert tree.nodes[child].depth == node.depth + 1
        if node.depth == 1:
            assert node.parent == ROOT
        # covers are released once the tree is built
        assert node.cover is None


def test_find_and_missing_itemsets(market_db):
    tree = build_tree(market_db)
    assert tree.find((0, 1)) is not None
    assert tree.find((0, 2)) is None
    assert tree.find(()) is None
    with pytest.raises(InvariantViolation):
        tree.count_of((0, 2))


def test_infrequent_candidates_are_not_extended():
    db = TransactionDB.build([['a', 'b'], ['a', 'b'], ['a', 'c'], ['a', 'c'], ['a', 'b', 'c']])
    counted = []
    cover_of = db.cover_of

    def spy(itemset, parent_cover=None):
        counted.append(tuple(itemset))
        return cover_of(itemset, parent_cover)

    db.cover_of = spy
    tree = ItemsetTree(db, 2, 5).build()

    # b & c occur together once only, so a & b & c is pruned before counting
    assert (1, 2) in counted
    assert (0, 1, 2) not in counted
    assert tree.find((1, 2)) is None
    assert tree.height == 2


def test_max_items_bounds_the_height():
    db = TransactionDB.build([['a', 'b', 'c', 'd']] * 3)
    assert build_tree(db, max_items=2).height == 2
    assert build_tree(db).height == 4


def test_tree_is_no_deeper_than_the_largest_transaction():
    db = TransactionDB.build([['a', 'b'], ['b', 'c'], ['a', 'c']])
    tree = build_tree(db, max_items=10)
    assert tree.max_items == 2
    assert tree.height == 2


def test_itemsets_above_max_support_are_extended_but_not_reported():
    db = TransactionDB.build([['a', 'b'], ['a', 'b'], ['a', 'c'], ['a']])
    tree = build_tree(db, min_count=1, max_count=3)
    labels = [itemset.labels for itemset in tree.itemsets()]
    assert ('a',) not in labels
    assert ('a', 'b') in labels
    assert ('b',) in labels
    assert tree.find((0,)) is not None


def test_ignored_items_are_left_out():
    db = TransactionDB.build([['a', 'b'], ['a', 'b']], appearances={'b': 'ignore'})
    tree = build_tree(db)
    assert [itemset.labels for itemset in tree.itemsets()] == [('a',)]


def test_closed_and_maximal_itemsets(market_db):
    tree = build_tree(market_db)
    closed = [itemset.labels for itemset in tree.itemsets(target='closed')]
    maximal = [itemset.labels for itemset in tree.itemsets(target='maximal')]
    assert closed == [('doritos',), ('apple',), ('beer', 'doritos'), ('doritos', 'apple'), ('apple', 'cheese')]
    assert maximal == [('beer', 'doritos'), ('doritos', 'apple'), ('apple', 'cheese')]


def test_cancel_between_levels(market_db):
    calls = []

    def cancel():
        calls.append(True)
        return True

    tree = ItemsetTree(market_db, 1, 6)
    with pytest.raises(MiningCancelled) as info:
        tree.build(cancel)
    assert info.value.level == 2
    assert len(calls) == 1
    assert tree.height == 1


@pytest.mark.parametrize("seed", [1, 7, 42])
def test_tree_matches_brute_force(seed):
    db = TransactionDB.build(random_transactions(seed))
    tree = build_tree(db, min_count=3)
    expected = {itemset: count for itemset, count in brute_force_counts(db).items() if count >= 3}
    found = {tree.itemset_of(handle): node.count for handle, node in enumerate(tree.nodes)}
    assert found == expected


@pytest.mark.parametrize("seed", [3, 11])
def test_downward_closure_and_monotonicity(seed):
    db = TransactionDB.build(random_transactions(seed, n_transactions=60, n_items=9, density=0.45))
    tree = build_tree(db, min_count=1)
    counts = {tree.itemset_of(handle): node.count for handle, node in enumerate(tree.nodes)}
    for itemset, count in counts.items():
        if len(itemset) < 2:
            continue
        for index in range(len(itemset)):
            subset = itemset[:index] + itemset[index + 1:]
            assert subset in counts
            assert counts[subset] >= count


@pytest.mark.parametrize("seed", [5, 6])
def test_counting_strategies_and_workers_agree(seed):
    transactions = random_transactions(seed)
    reference = build_tree(TransactionDB.build(transactions), min_count=2)
    scan = build_tree(TransactionDB.build(transactions, counting='scan'), min_count=2)
    threaded = build_tree(TransactionDB.build(transactions), min_count=2, n_jobs=2)

    def summary(tree):
        return [(tree.itemset_of(handle), node.count) for handle, node in enumerate(tree.nodes)]

    assert summary(scan) == summary(reference)
    assert summary(threaded) == summary(reference)
