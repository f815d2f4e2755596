import logging
import time

from aprioriminer.Associations import Associations
from aprioriminer.Config import MinerConfig
from aprioriminer.Errors import ConfigError
from aprioriminer.ItemsetTree import ItemsetTree
from aprioriminer.RuleGenerator import RuleGenerator
from aprioriminer.Significance import SignificanceEvaluator
from aprioriminer.TransactionDB import TransactionDB

log = logging.getLogger(__name__)


class AprioriMiner:
    """Finds frequent itemsets and association rules with the apriori algorithm.
    Level-wise candidate generation with subset pruning, in the manner of Christian Borgelt's apriori program.

    This program is free software: you can redistribute it and/or modify it under the terms of the
    GNU General Public License as published by the Free Software Foundation, either version 3 of the License, or
    (at your option) any later version.

    This program is distributed in the hope that it will be useful, but WITHOUT ANY WARRANTY; without even the
    implied warranty of MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU General Public License
    for more details.

    You should have received a copy of the GNU General Public License along with this program.
    If not, see <http://www.gnu.org/licenses/>.

    :param
    @input_data - a TransactionDB, or a sequence of transactions (each a sequence of item labels)
    @config - a MinerConfig; if None, one is created from the keyword options
    @appearances - mapping item label -> appearance indicator ('in', 'out', 'both', 'none'),
        only used when input_data still has to be encoded
    @options - MinerConfig fields (min_items, max_items, min_support, max_support, min_confidence, ...)
    """
    def __init__(self,
                 input_data,
                 config=None,
                 appearances=None,
                 **options
                 ):
        if config is None:
            config = MinerConfig.from_options(**options)
        elif options:
            raise ConfigError("options cannot be combined with an explicit config: %s" % ", ".join(sorted(options)))
        self.config = config
        self.input_data = input_data
        self.appearances = appearances

        self.database = None
        self.tree = None

    def fit(self, cancel=None):
        """Mine the input data.

        cancel, if given, is called before each new level of the itemset tree; when
        it returns True the run stops with MiningCancelled and nothing is returned.
        """
        start_time = time.time()

        # load data
        self.database = load_data(self, self.input_data)
        result = Associations(self.config.target, self.database.total_count(), self.database.skipped)

        # find frequent itemsets
        tree = build_tree(self, self.database, cancel)

        if self.config.target == 'rules':
            generator = extract_rules(self, tree, result)
            result.stats['rejected'] = dict(generator.rejected)
            # the tree is only kept when itemsets are the result
            self.tree = None
        else:
            extract_itemsets(self, tree, result)
            self.tree = tree

        result.stats.update({
            'num_items': len(self.database.catalog),
            'num_transactions': self.database.total_count(),
            'skipped_transactions': self.database.skipped,
            'levels': tree.height,
            'num_itemsets': len(tree.nodes),
            'num_rules': len(result.rules),
            'execution_time': time.time() - start_time,
        })
        if not result:
            log.info("no %s found under the given thresholds", self.config.target)
        return result


def load_data(miner, input_data):
    config = miner.config
    if isinstance(input_data, TransactionDB):
        return input_data.with_counting(config.counting)
    return TransactionDB.build(input_data, item_order=config.item_order, appearances=miner.appearances,
                               counting=config.counting)


def build_tree(miner, database, cancel=None):
    config = miner.config
    n = database.total_count()
    tree = ItemsetTree(database, config.min_count(n), config.max_count(n), config.max_items, config.n_jobs)
    return tree.build(cancel)


def extract_rules(miner, tree, result):
    config = miner.config
    evaluator = None
    if config.significance is not None:
        evaluator = SignificanceEvaluator(config.significance, config.significance_test)

    generator = RuleGenerator(tree, config, evaluator)
    # rules are collected completely before they are handed out
    for rule in list(generator.generate()):
        result.add_rule(rule)
    log.info("[%d rule(s)] done", len(result.rules))
    return generator


def extract_itemsets(miner, tree, result):
    config = miner.config
    for itemset in tree.itemsets(config.min_items, config.max_items, config.target):
        result.add_itemset(itemset)
    log.info("[%d set(s)] done", len(result.itemsets))


# ############################# convenience functions #############################
def find_association_rules(transactions, **options):
    return AprioriMiner(transactions, **options).fit().rules


def find_itemsets(transactions, **options):
    options.setdefault('target', 'sets')
    if options['target'] == 'rules':
        raise ConfigError("find_itemsets needs an itemset target, not 'rules'")
    return AprioriMiner(transactions, **options).fit().itemsets
