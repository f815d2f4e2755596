import pandas as pd


class Associations:
    """The ordered result of one mining run.

    Rules and itemsets are kept in order of discovery: by itemset size, then in
    tree order within one size. Sorting them differently is left to the caller.
    """

    def __init__(self, target='rules', n_transactions=0, skipped_transactions=0):
        self.target = target
        # list of AssociationRule objects, in order of discovery
        self.rules = []
        # list of ItemsetRec objects, in order of discovery
        self.itemsets = []
        # number of transactions the result was mined from
        self.n_transactions = n_transactions
        # number of input transactions that were dropped
        self.skipped_transactions = skipped_transactions
        # mining statistics
        self.stats = dict()

    def add_rule(self, rule):
        self.rules.append(rule)

    def add_itemset(self, itemset):
        self.itemsets.append(itemset)

    @property
    def results(self):
        return self.rules if self.target == 'rules' else self.itemsets

    def __iter__(self):
        return iter(self.results)

    def __len__(self):
        return len(self.results)

    def __bool__(self):
        return len(self.results) > 0

    def to_lines(self):
        return [result.to_s() for result in self.results]

    def to_dataframe(self):
        if self.target == 'rules':
            columns = ['antecedent', 'consequent', 'support', 'antecedent_transactions', 'support_count',
                       'confidence', 'lift', 'value', 'p_value']
            return pd.DataFrame([rule.to_dict() for rule in self.rules], columns=columns)
        return pd.DataFrame([{'itemset': list(itemset.labels), 'support': itemset.support, 'count': itemset.count}
                             for itemset in self.itemsets], columns=['itemset', 'support', 'count'])
