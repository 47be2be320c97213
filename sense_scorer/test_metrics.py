"""
Tests for the per-instance agreement metrics.
"""

import math

import pytest

from sense_scorer.key import SenseKey, term_sense_counts
from sense_scorer.metrics import (
    GoodmanKruskalGamma,
    JaccardIndex,
    METRICS,
    WeightedNDCG,
    get_metric,
)


GOLD = SenseKey({
    'bank': {
        'i1': {'A': 1.0},
        'i2': {'A': 1.0, 'B': 0.5},
        'i3': {'B': 1.0},
        'i4': {'C': 1.0},
    },
})


def score_one(metric, gold_labels, test_labels, term_senses=('A', 'B', 'C')):
    gold = SenseKey({'t': {'x': gold_labels, 'pad': {s: 1.0 for s in term_senses}}})
    test = SenseKey({'t': {'x': test_labels}})
    return metric.test(test, gold, {'x'}, term_sense_counts(gold))['x']


# =============================================================================
# Contract shared by all metrics
# =============================================================================

@pytest.mark.parametrize("name", sorted(METRICS))
def test_unlabelled_instances_are_omitted(name):
    test = SenseKey({'bank': {'i1': {'A': 1.0}, 'i2': {}, 'i3': {'B': 0.0}}})
    scores = get_metric(name).test(test, GOLD, set(GOLD.instances()), term_sense_counts(GOLD))

    assert set(scores) == {'i1'}


@pytest.mark.parametrize("name", sorted(METRICS))
def test_only_requested_instances_are_scored(name):
    scores = get_metric(name).test(GOLD, GOLD, {'i2', 'i4'}, term_sense_counts(GOLD))
    assert set(scores) == {'i2', 'i4'}
    assert all(math.isfinite(s) for s in scores.values())


@pytest.mark.parametrize("name", sorted(METRICS))
def test_inputs_are_not_modified(name):
    test = SenseKey({'bank': {'i1': {'B': 1.0}, 'i2': {'A': 0.2, 'C': 0.9}}})
    before = (GOLD.to_dict(), test.to_dict())
    get_metric(name).test(test, GOLD, set(GOLD.instances()), term_sense_counts(GOLD))

    assert (GOLD.to_dict(), test.to_dict()) == before


def test_identical_keys_score_one():
    counts = term_sense_counts(GOLD)
    for metric in (JaccardIndex(), WeightedNDCG()):
        scores = metric.test(GOLD, GOLD, set(GOLD.instances()), counts)
        assert scores == pytest.approx({i: 1.0 for i in GOLD.instances()})


def test_get_metric():
    assert isinstance(get_metric('gamma'), GoodmanKruskalGamma)
    with pytest.raises(ValueError):
        get_metric('accuracy')


# =============================================================================
# Jaccard
# =============================================================================

def test_jaccard_overlap():
    metric = JaccardIndex()
    assert score_one(metric, {'A': 1.0}, {'A': 0.3}) == 1.0
    assert score_one(metric, {'A': 1.0, 'B': 1.0}, {'A': 1.0}) == 0.5
    assert score_one(metric, {'A': 1.0}, {'B': 1.0, 'C': 1.0}) == 0.0


# =============================================================================
# Gamma
# =============================================================================

def test_gamma_same_order():
    metric = GoodmanKruskalGamma()
    assert score_one(metric, {'A': 1.0, 'B': 0.5}, {'A': 0.9, 'B': 0.2}) == 1.0


def test_gamma_reversed_order():
    metric = GoodmanKruskalGamma()
    assert score_one(metric, {'A': 1.0, 'B': 0.5}, {'A': 0.1, 'B': 0.5, 'C': 0.9}) == -1.0


def test_gamma_all_ties():
    metric = GoodmanKruskalGamma()
    assert score_one(metric, {'A': 1.0}, {'A': 1.0}, term_senses=('A',)) == 0.0


def test_gamma_ignores_sense_count():
    metric = GoodmanKruskalGamma()
    gold_labels = {'A': 1.0, 'B': 0.5}
    test_labels = {'A': 0.2, 'B': 0.9}

    exact = metric.score_instance(gold_labels, test_labels, {'A', 'B'}, 2)
    larger = metric.score_instance(gold_labels, test_labels, {'A', 'B'}, 4)
    assert exact == larger == -1.0


def test_gamma_mixed():
    metric = GoodmanKruskalGamma()
    # pairs: (A,B) concordant, (A,C) concordant, (B,C) discordant
    score = score_one(metric, {'A': 1.0, 'B': 0.5}, {'A': 0.9, 'C': 0.4})
    assert score == pytest.approx(1 / 3)


# =============================================================================
# WNDC
# =============================================================================

def test_wndc_partial_weight():
    metric = WeightedNDCG()
    assert score_one(metric, {'A': 1.0}, {'A': 0.5}) == pytest.approx(0.5)
    assert score_one(metric, {'A': 1.0}, {'B': 1.0}) == 0.0


def test_wndc_swapped_ranking():
    metric = WeightedNDCG()
    score = score_one(metric, {'A': 1.0, 'B': 0.5}, {'B': 1.0, 'A': 0.5})

    dcg = 0.5 * 0.5 + 1.0 * 0.5 / math.log2(3)
    idcg = 1.0 + 0.5 / math.log2(3)
    assert score == pytest.approx(dcg / idcg)
    assert 0.0 <= score < 1.0


def test_wndc_no_gold_sense():
    assert score_one(WeightedNDCG(), {}, {'A': 1.0}) == 0.0
