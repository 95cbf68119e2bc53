import pytest

from imgcompare import ComparatorConfig, ComparisonMode, ConfigError, HashStrategy


def test_defaults():
    config = ComparatorConfig()
    assert config.hash_strategy is HashStrategy.AVERAGE
    assert config.mode is ComparisonMode.STANDARD
    assert config.size == 8
    assert config.precision == 3
    assert not config.legacy


def test_strings_are_coerced():
    config = ComparatorConfig(hash_strategy="gradient", mode="legacy")
    assert config.hash_strategy is HashStrategy.GRADIENT
    assert config.legacy


@pytest.mark.parametrize(
    "kwargs",
    [
        {"size": 1},
        {"precision": -1},
        {"color_sample_size": 0},
        {"workers": -2},
        {"request_timeout": 0},
        {"hash_strategy": "median"},
        {"mode": "turbo"},
    ],
)
def test_invalid_values(kwargs):
    with pytest.raises(ConfigError):
        ComparatorConfig(**kwargs)
