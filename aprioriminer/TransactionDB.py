import copy
import logging

import numpy as np
import pandas as pd

from aprioriminer.Errors import InputError, InvariantViolation
from aprioriminer.ItemCatalog import ItemCatalog, APP_BOTH

log = logging.getLogger(__name__)

# tokens that separate antecedent and consequent in a rule line
RESERVED_LABELS = ('->', '<-')


# ############################# counting strategies #############################
# A counting strategy computes the cover of an itemset, i.e. the sorted array of the ids of all transactions
# that contain the itemset. parent_cover, if given, is the cover of the itemset without its last item.
class TidListCounter:
    name = 'tidlist'

    def __init__(self, transactions, n_items):
        # save the transaction list according to item id
        tids = [[] for _ in range(n_items)]
        for tid, transaction in enumerate(transactions):
            for item in transaction:
                tids[item].append(tid)
        self.tid_lists = [np.array(cover, dtype=np.int64) for cover in tids]
        self.n_transactions = len(transactions)

    def cover(self, itemset, parent_cover=None):
        if not itemset:
            return np.arange(self.n_transactions, dtype=np.int64)
        if parent_cover is not None:
            return np.intersect1d(parent_cover, self.tid_lists[itemset[-1]], assume_unique=True)

        # intersect the shortest posting lists first
        items = sorted(itemset, key=lambda item: len(self.tid_lists[item]))
        cover = self.tid_lists[items[0]]
        for item in items[1:]:
            if len(cover) == 0:
                break
            cover = np.intersect1d(cover, self.tid_lists[item], assume_unique=True)
        return cover


class ScanCounter:
    name = 'scan'

    def __init__(self, transactions, n_items):
        self.transaction_sets = [frozenset(transaction) for transaction in transactions]

    def cover(self, itemset, parent_cover=None):
        wanted = frozenset(itemset)
        return np.array([tid for tid, transaction in enumerate(self.transaction_sets) if wanted <= transaction],
                        dtype=np.int64)


COUNTERS = {
    TidListCounter.name: TidListCounter,
    ScanCounter.name: ScanCounter,
}


class TransactionDB:
    """The catalog-encoded transactions of one mining run.

    Every transaction is a tuple of unique item ids in ascending order. The
    database is never modified once it is built, so it may be read by several
    counting workers at the same time.
    """

    def __init__(self, catalog, transactions, skipped=0, input_errors=None, counting='tidlist'):
        self.catalog = catalog
        self.transactions = tuple(transactions)
        # number of raw transactions that were dropped while building
        self.skipped = skipped
        self.input_errors = list(input_errors or [])
        # size of the largest transaction, no frequent itemset can be larger
        self.max_size = max((len(transaction) for transaction in self.transactions), default=0)
        self._set_counter(counting)

    def _set_counter(self, counting):
        try:
            counter_class = COUNTERS[counting]
        except KeyError:
            raise InvariantViolation("unknown counting strategy %r" % (counting,))
        self.counter = counter_class(self.transactions, len(self.catalog))

    @property
    def counting(self):
        return self.counter.name

    def with_counting(self, counting):
        if counting == self.counting:
            return self
        other = copy.copy(self)
        other._set_counter(counting)
        return other

    @classmethod
    def build(cls, raw_transactions, item_order='appearance', appearances=None, default_appearance=APP_BOTH,
              counting='tidlist'):
        catalog = ItemCatalog(default_appearance)
        for label, indicator in (appearances or {}).items():
            catalog.set_appearance(label, indicator)

        transactions = []
        input_errors = []
        for index, raw in enumerate(raw_transactions):
            try:
                transaction = encode_transaction(catalog, raw, index)
            except InputError as err:
                log.warning("skipping transaction %d: %s", index, err)
                input_errors.append(err)
                continue
            transactions.append(transaction)

        if item_order != 'appearance':
            id_map = catalog.recode(item_order)
            transactions = [tuple(sorted(id_map[item] for item in transaction)) for transaction in transactions]

        log.info("[%d item(s), %d transaction(s)] read, %d transaction(s) skipped",
                 len(catalog), len(transactions), len(input_errors))
        return cls(catalog, transactions, skipped=len(input_errors), input_errors=input_errors,
                   counting=counting)

    @classmethod
    def from_file(cls, path, comment='#', **kwargs):
        log.info("reading %s ...", path)
        with open(path, 'r', encoding='utf-8') as input_file:
            return cls.build(read_transactions(input_file, comment), **kwargs)

    @classmethod
    def from_dataframe(cls, data, **kwargs):
        # market-basket data: one row per transaction, empty cells are padding
        rows = []
        for row in data.itertuples(index=False):
            rows.append([str(value).strip() for value in row if not pd.isna(value) and str(value).strip() != ''])
        return cls.build(rows, **kwargs)

    def total_count(self):
        return len(self.transactions)

    def __len__(self):
        return len(self.transactions)

    def cover_of(self, itemset, parent_cover=None):
        itemset = self._check_itemset(itemset)
        return self.counter.cover(itemset, parent_cover)

    def support_count_of(self, itemset):
        return int(len(self.cover_of(itemset)))

    def support_of(self, itemset):
        # support in percent
        if not self.transactions:
            return 0.0
        return 100.0 * self.support_count_of(itemset) / len(self.transactions)

    def _check_itemset(self, itemset):
        itemset = tuple(sorted(itemset))
        n_items = len(self.catalog)
        for item in itemset:
            if not 0 <= item < n_items:
                raise InvariantViolation("unknown item id %r" % (item,))
        return itemset


def read_transactions(lines, comment='#'):
    # one transaction per line, whitespace separated items
    for line in lines:
        line = line.strip()
        if not line or (comment and line.startswith(comment)):
            continue
        yield line.split()


def encode_transaction(catalog, raw, index=None):
    if isinstance(raw, (str, bytes)):
        raise InputError("transaction must be a sequence of item labels, not a string", index)
    try:
        labels = list(raw)
    except TypeError:
        raise InputError("transaction is not a sequence: %r" % (raw,), index)

    for label in labels:
        if not isinstance(label, str):
            raise InputError("item %r is not a string" % (label,), index)
        # rule lines are whitespace separated, so a label must stay a single token and never be an arrow
        if label in RESERVED_LABELS or any(char.isspace() for char in label):
            raise InputError("item %r cannot be written to a rule line" % (label,), index)

    unique = list(dict.fromkeys(label for label in labels if label != ''))
    if not unique:
        raise InputError("empty transaction", index)
    if len(unique) < len(labels):
        log.debug("transaction %s: duplicate items removed", index)

    transaction = tuple(sorted(catalog.intern(label) for label in unique))
    for item in transaction:
        catalog.add_occurrence(item)
    return transaction
