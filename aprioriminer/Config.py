import math
from dataclasses import dataclass, fields, asdict
from typing import Optional

from aprioriminer.Errors import ConfigError


TARGETS = ('rules', 'sets', 'closed', 'maximal')

# additional rule evaluation measures, see Significance.RULE_MEASURES
EVALUATIONS = ('diff', 'quot', 'aimp', 'info', 'chi2', 'pval')

SIGNIFICANCE_TESTS = ('chi2', 'fisher')

ITEM_ORDERS = ('appearance', 'ascending', 'descending')

COUNTING_STRATEGIES = ('tidlist', 'scan')


@dataclass
class MinerConfig:
    """
    :param
    @min_items - minimal number of items per set/rule
    @max_items - maximal number of items per set/rule, None for no limit
    @min_support - minimal support of a set/rule, in percent
    @max_support - maximal support of a set/rule, in percent
    @min_confidence - minimal confidence of a rule, in percent
    @target - 'rules', 'sets' (frequent item sets), 'closed' or 'maximal' item sets
    @multi_item_consequents - True: a consequent may hold several items; False: exactly one item
    @evaluation - additional rule evaluation measure, None for no additional measure
    @min_evaluation - minimal value of the additional evaluation measure, in percent
    @significance - p-value threshold of the significance filter, None to switch the filter off
    @significance_test - 'chi2' or 'fisher'
    @item_order - assign item ids by 'appearance' or by 'ascending'/'descending' frequency
    @counting - 'tidlist' counts by intersecting posting lists, 'scan' by scanning all transactions
    @n_jobs - number of joblib workers used to count the candidates of one level
    """
    min_items: int = 1
    max_items: Optional[int] = None
    min_support: float = 10.0
    max_support: float = 100.0
    min_confidence: float = 80.0
    target: str = 'rules'
    multi_item_consequents: bool = False
    evaluation: Optional[str] = None
    min_evaluation: float = 10.0
    significance: Optional[float] = None
    significance_test: str = 'chi2'
    item_order: str = 'appearance'
    counting: str = 'tidlist'
    n_jobs: int = 1

    def __post_init__(self):
        self.validate()

    @classmethod
    def from_options(cls, **options):
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ConfigError("unknown option(s): %s" % ", ".join(unknown))
        return cls(**options)

    def validate(self):
        for name in ('min_support', 'max_support', 'min_confidence', 'min_evaluation'):
            _check_percent(name, getattr(self, name))
        if self.min_support > self.max_support:
            raise ConfigError("min_support %g%% exceeds max_support %g%%" % (self.min_support, self.max_support))

        if not _is_int(self.min_items) or self.min_items < 1:
            raise ConfigError("invalid set size/rule length %r" % (self.min_items,))
        if self.max_items is not None:
            if not _is_int(self.max_items) or self.max_items < 1:
                raise ConfigError("invalid set size/rule length %r" % (self.max_items,))
            if self.min_items > self.max_items:
                raise ConfigError("min_items %d exceeds max_items %d" % (self.min_items, self.max_items))

        _check_choice('target', self.target, TARGETS)
        if self.evaluation is not None:
            _check_choice('evaluation', self.evaluation, EVALUATIONS)
        _check_choice('significance_test', self.significance_test, SIGNIFICANCE_TESTS)
        _check_choice('item_order', self.item_order, ITEM_ORDERS)
        _check_choice('counting', self.counting, COUNTING_STRATEGIES)

        if self.significance is not None:
            if not _is_number(self.significance) or not 0.0 < self.significance <= 1.0:
                raise ConfigError("invalid significance level %r" % (self.significance,))

        if not _is_int(self.n_jobs) or self.n_jobs == 0:
            raise ConfigError("invalid number of jobs %r" % (self.n_jobs,))

    def min_count(self, n_transactions):
        # absolute minimal support, never below one transaction
        return max(1, int(math.ceil(round(n_transactions * self.min_support / 100.0, 9))))

    def max_count(self, n_transactions):
        return int(math.floor(round(n_transactions * self.max_support / 100.0, 9)))

    def to_dict(self):
        return asdict(self)


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool) and not math.isnan(value)


def _check_percent(name, value):
    if not _is_number(value) or not 0.0 <= value <= 100.0:
        raise ConfigError("invalid %s %r (must lie in [0, 100])" % (name, value))


def _check_choice(name, value, choices):
    if value not in choices:
        raise ConfigError("invalid %s %r (one of %s)" % (name, value, ", ".join(choices)))
