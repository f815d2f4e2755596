import logging
from itertools import combinations

from aprioriminer.AssociationRule import AssociationRule
from aprioriminer.ItemsetRec import percent
from aprioriminer.Significance import rule_measure

log = logging.getLogger(__name__)

# tolerance of the confidence and measure comparisons
EPSILON = 1e-12


class RuleGenerator:
    """Derives association rules from the frequent itemsets of a built tree.

    Every reportable itemset I with at least two items and a size within
    [min_items, max_items] is split into an antecedent A and a consequent
    C = I - A. A rule is kept if its confidence count(I) / count(A) reaches
    min_confidence, if the optional additional evaluation measure reaches
    min_evaluation and, when a significance evaluator is given, if its p-value
    does not exceed the evaluator's threshold.
    """

    def __init__(self, tree, config, evaluator=None):
        self.tree = tree
        self.database = tree.database
        self.catalog = tree.catalog
        self.config = config
        self.evaluator = evaluator
        # number of rules discarded by each filter
        self.rejected = {'confidence': 0, 'evaluation': 0, 'significance': 0}

    def generate(self):
        min_items = max(2, self.config.min_items)
        for handle in self.tree.handles(min_items, self.config.max_items):
            itemset = self.tree.itemset_of(handle)
            count = self.tree.nodes[handle].count
            for consequent in self.consequents(itemset):
                rule = self.make_rule(itemset, count, consequent)
                if rule is not None:
                    yield rule

    def consequents(self, itemset):
        # single items first, from the last item of the itemset to the first one
        largest = len(itemset) - 1 if self.config.multi_item_consequents else 1
        reverse = tuple(reversed(itemset))
        for size in range(1, largest + 1):
            for consequent in combinations(reverse, size):
                yield tuple(sorted(consequent))

    def make_rule(self, itemset, s_set, consequent):
        catalog = self.catalog
        antecedent = tuple(item for item in itemset if item not in consequent)
        if not all(catalog.may_be_consequent(item) for item in consequent):
            return None
        if not all(catalog.may_be_antecedent(item) for item in antecedent):
            return None

        n = self.database.total_count()
        s_body = self.tree.count_of(antecedent)
        s_head = self.tree.count_of(consequent)

        confidence = s_set / float(s_body)
        if confidence < self.config.min_confidence / 100.0 - EPSILON:
            self.rejected['confidence'] += 1
            return None

        value = None
        if self.config.evaluation is not None:
            value = rule_measure(self.config.evaluation, s_set, s_body, s_head, n)
            if value < self.config.min_evaluation / 100.0 - EPSILON:
                self.rejected['evaluation'] += 1
                return None

        p_value = None
        if self.evaluator is not None:
            p_value = self.evaluator.pvalue(s_set, s_body, s_head, n)
            if not self.evaluator.is_significant(p_value):
                self.rejected['significance'] += 1
                return None

        return AssociationRule(antecedent=catalog.labels_of(antecedent),
                               consequent=catalog.labels_of(consequent),
                               support=percent(s_body, n),
                               num_antecedent_transactions=s_body,
                               confidence=100.0 * confidence,
                               support_count=s_set,
                               lift=confidence * n / float(s_head),
                               value=value,
                               p_value=p_value)
