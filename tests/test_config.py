import pytest

from aprioriminer.Config import MinerConfig
from aprioriminer.Errors import ConfigError


def test_defaults():
    config = MinerConfig()
    assert config.min_support == 10.0
    assert config.min_confidence == 80.0
    assert config.target == 'rules'
    assert config.max_items is None
    assert config.to_dict()['counting'] == 'tidlist'


@pytest.mark.parametrize("options", [
    dict(min_support=-1),
    dict(min_support=101),
    dict(max_support=150),
    dict(min_confidence=120),
    dict(min_evaluation=-0.5),
    dict(min_support=60, max_support=50),
    dict(min_items=0),
    dict(max_items=0),
    dict(min_items=4, max_items=3),
    dict(min_items=2.5),
    dict(target='rule'),
    dict(evaluation='lift'),
    dict(significance=0),
    dict(significance=1.5),
    dict(significance_test='anova'),
    dict(item_order='random'),
    dict(counting='bitmap'),
    dict(n_jobs=0),
])
def test_invalid_options(options):
    with pytest.raises(ConfigError):
        MinerConfig(**options)


def test_unknown_option():
    with pytest.raises(ConfigError) as info:
        MinerConfig.from_options(min_supp=10)
    assert 'min_supp' in str(info.value)


@pytest.mark.parametrize("n, min_support, expected", [
    (6, 1, 1),
    (6, 0, 1),
    (6, 50, 3),
    (6, 51, 4),
    (10, 30, 3),
    (3, 100, 3),
])
def test_min_count(n, min_support, expected):
    assert MinerConfig(min_support=min_support).min_count(n) == expected


@pytest.mark.parametrize("n, max_support, expected", [
    (6, 100, 6),
    (6, 50, 3),
    (6, 49, 2),
    (10, 30, 3),
])
def test_max_count(n, max_support, expected):
    assert MinerConfig(min_support=0, max_support=max_support).max_count(n) == expected
