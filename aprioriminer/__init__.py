from aprioriminer.AprioriMiner import AprioriMiner, find_association_rules, find_itemsets
from aprioriminer.AssociationRule import AssociationRule
from aprioriminer.Associations import Associations
from aprioriminer.Config import MinerConfig
from aprioriminer.Errors import (
    AprioriError,
    InputError,
    ConfigError,
    ParseError,
    InvariantViolation,
    MiningCancelled
)
from aprioriminer.ItemCatalog import ItemCatalog
from aprioriminer.ItemsetRec import ItemsetRec
from aprioriminer.ItemsetTree import ItemsetTree
from aprioriminer.RuleGenerator import RuleGenerator
from aprioriminer.Significance import SignificanceEvaluator
from aprioriminer.TransactionDB import TransactionDB

__version__ = '1.0.0'

__all__ = [
    'AprioriMiner', 'find_association_rules', 'find_itemsets',
    'AssociationRule', 'Associations', 'MinerConfig',
    'AprioriError', 'InputError', 'ConfigError', 'ParseError', 'InvariantViolation', 'MiningCancelled',
    'ItemCatalog', 'ItemsetRec', 'ItemsetTree', 'RuleGenerator', 'SignificanceEvaluator', 'TransactionDB',
]
