import numpy as np
import pytest

from aprioriminer.TransactionDB import TransactionDB


MARKET_BASKET = [
    ['beer', 'doritos'],
    ['apple', 'cheese'],
    ['beer', 'doritos'],
    ['apple', 'cheese'],
    ['apple', 'cheese'],
    ['apple', 'doritos'],
]

# options of the end-to-end example
EXAMPLE_OPTIONS = dict(min_items=2, max_items=5, min_support=1, max_support=100, min_confidence=20)


def random_transactions(seed, n_transactions=40, n_items=8, density=0.35):
    rng = np.random.default_rng(seed)
    transactions = []
    while len(transactions) < n_transactions:
        present = rng.random(n_items) < density
        transaction = ['i%d' % item for item in range(n_items) if present[item]]
        if transaction:
            transactions.append(transaction)
    return transactions


@pytest.fixture
def market_basket():
    return [list(transaction) for transaction in MARKET_BASKET]


@pytest.fixture
def market_db(market_basket):
    return TransactionDB.build(market_basket)
