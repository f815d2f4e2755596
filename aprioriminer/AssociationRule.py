import logging
import re
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from aprioriminer.Errors import ParseError

log = logging.getLogger(__name__)

_NUMBERS = r"\((\d+\.\d)(?:/(\d+))?,\s+(\d+\.\d)\)"

# antecedent -> consequent (support[/count], confidence)
FORWARD_LINE = re.compile(r"^\s*(.+?)\s+->\s+(.+?)\s+" + _NUMBERS + r"\s*$")
# consequent <- antecedent (support[/count], confidence)
REVERSE_LINE = re.compile(r"^\s*(.+?)\s+<-\s+(.+?)\s+" + _NUMBERS + r"\s*$")


@dataclass(frozen=True)
class AssociationRule:
    """An association rule ``antecedent -> consequent``.

    ``support`` is the support of the antecedent in percent and
    ``num_antecedent_transactions`` the number of transactions that contain
    the antecedent (None when it is not tracked); ``confidence`` is in
    percent. Both percentages are kept rounded to the one decimal place of the
    line format, so that a rule and its rendered line compare equal after a
    round trip. ``consequent`` is a single label, or a tuple of labels for a
    rule with a multi-item consequent.

    Equality covers exactly the fields of the line format; the absolute
    support of the whole rule, the lift, the value of an additional
    evaluation measure and the p-value are carried along but not compared.
    """
    antecedent: Tuple[str, ...]
    consequent: Union[str, Tuple[str, ...]]
    support: float
    num_antecedent_transactions: Optional[int]
    confidence: float
    support_count: Optional[int] = field(default=None, compare=False)
    lift: Optional[float] = field(default=None, compare=False)
    value: Optional[float] = field(default=None, compare=False)
    p_value: Optional[float] = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, 'antecedent', tuple(self.antecedent))
        if not isinstance(self.consequent, str):
            consequent = tuple(self.consequent)
            object.__setattr__(self, 'consequent', consequent[0] if len(consequent) == 1 else consequent)
        object.__setattr__(self, 'support', _one_decimal(self.support))
        object.__setattr__(self, 'confidence', _one_decimal(self.confidence))

    @property
    def consequent_items(self):
        if isinstance(self.consequent, str):
            return (self.consequent,)
        return self.consequent

    @property
    def size(self):
        return len(self.antecedent) + len(self.consequent_items)

    def _numbers(self):
        count = "" if self.num_antecedent_transactions is None else "/%d" % self.num_antecedent_transactions
        return "(%.1f%s, %.1f)" % (self.support, count, self.confidence)

    def to_s(self):
        return "%s -> %s %s" % (" ".join(self.antecedent), " ".join(self.consequent_items), self._numbers())

    def to_reverse_s(self):
        return "%s <- %s %s" % (" ".join(self.consequent_items), " ".join(self.antecedent), self._numbers())

    def __str__(self):
        return self.to_s()

    def to_dict(self):
        return {
            'antecedent': list(self.antecedent),
            'consequent': list(self.consequent_items),
            'support': self.support,
            'antecedent_transactions': self.num_antecedent_transactions,
            'support_count': self.support_count,
            'confidence': self.confidence,
            'lift': self.lift,
            'value': self.value,
            'p_value': self.p_value,
        }

    # ################## parsing ###################
    @classmethod
    def parse_line(cls, line, line_no=None):
        """Parse a rule from either line orientation.

        foo <- bar baz bangle (66.7/4, 75.0)
        bar baz bangle -> foo (66.7/4, 75.0)
        """
        text = line.rstrip("\r\n")
        match = REVERSE_LINE.match(text)
        if match:
            consequent, antecedent = match.group(1), match.group(2)
        else:
            match = FORWARD_LINE.match(text)
            if not match:
                raise ParseError("malformed rule line: %r" % (text,), line_no, text)
            antecedent, consequent = match.group(1), match.group(2)

        support, transactions, confidence = match.group(3), match.group(4), match.group(5)
        return cls(antecedent=tuple(antecedent.split()),
                   consequent=tuple(consequent.split()),
                   support=float(support),
                   num_antecedent_transactions=int(transactions) if transactions is not None else None,
                   confidence=float(confidence))

    @classmethod
    def from_lines(cls, lines):
        # a bad line is reported and skipped, it never discards the other lines
        rules = []
        errors = []
        for line_no, line in enumerate(lines, 1):
            if not line.strip():
                continue
            try:
                rules.append(cls.parse_line(line, line_no))
            except ParseError as err:
                log.warning("line %d: %s", line_no, err)
                errors.append(err)
        return rules, errors

    @classmethod
    def from_file(cls, filename):
        with open(filename, 'r', encoding='utf-8') as rule_file:
            return cls.from_lines(rule_file)


def _one_decimal(value):
    return float("%.1f" % value)
