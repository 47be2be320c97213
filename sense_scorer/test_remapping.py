"""
Tests for sense remapping strategies.
"""

import pytest

from sense_scorer.key import SenseKey
from sense_scorer.remapping import GradedReweightedKeyMapper, IdentityMapper


def bank_keys():
    """Gold: i1-i4 are A, i5-i8 are B. Test: a perfect clustering c1/c2."""
    gold = SenseKey({'bank': {
        **{f"i{n}": {'A': 1.0} for n in range(1, 5)},
        **{f"i{n}": {'B': 1.0} for n in range(5, 9)},
    }})
    test = SenseKey({'bank': {
        **{f"i{n}": {'c1': 1.0} for n in range(1, 5)},
        **{f"i{n}": {'c2': 1.0} for n in range(5, 9)},
    }})
    return gold, test


def test_identity_mapper_passes_key_through():
    gold, test = bank_keys()
    assert IdentityMapper().convert(gold, test, frozenset(gold.instances())) is test


def test_perfect_clustering_maps_to_gold_senses():
    gold, test = bank_keys()
    training = frozenset(gold.instances()) - {'i1', 'i5'}
    remapped = GradedReweightedKeyMapper().convert(gold, test, training)

    assert remapped.instances() == test.instances()
    assert dict(remapped.labels('i1')) == pytest.approx({'A': 1.0})
    assert dict(remapped.labels('i5')) == pytest.approx({'B': 1.0})


def test_graded_mapping_mixes_gold_senses():
    gold = SenseKey({'bank': {
        'i1': {'A': 1.0}, 'i2': {'A': 1.0}, 'i3': {'B': 1.0}, 'i4': {'A': 1.0},
    }})
    test = SenseKey({'bank': {
        'i1': {'c1': 1.0}, 'i2': {'c1': 1.0}, 'i3': {'c1': 1.0}, 'i4': {'c1': 1.0},
    }})
    mapper = GradedReweightedKeyMapper()

    induced, gold_senses, matrix = mapper.mapping_matrix(gold, test, 'bank', {'i1', 'i2', 'i3'})
    assert induced == ['c1']
    assert gold_senses == ['A', 'B']
    assert list(matrix[0]) == pytest.approx([2 / 3, 1 / 3])

    remapped = mapper.convert(gold, test, {'i1', 'i2', 'i3'})
    assert dict(remapped.labels('i4')) == pytest.approx({'A': 2 / 3, 'B': 1 / 3})


def test_total_instance_weight_is_preserved():
    gold, test = bank_keys()
    test = SenseKey({'bank': {**test.to_dict()['bank'], 'i8': {'c1': 0.5, 'c2': 1.5}}})
    training = frozenset(gold.instances()) - {'i8'}

    labels = GradedReweightedKeyMapper().convert(gold, test, training).labels('i8')
    assert sum(labels.values()) == pytest.approx(2.0)
    assert dict(labels) == pytest.approx({'A': 0.5, 'B': 1.5})


def test_held_out_gold_labels_do_not_affect_mapping():
    gold, test = bank_keys()
    training = frozenset(gold.instances()) - {'i1', 'i5'}
    # relabel the held-out instances in the gold key
    altered = gold.to_dict()
    altered['bank']['i1'] = {'Z': 1.0}
    altered['bank']['i5'] = {'A': 1.0}

    mapper = GradedReweightedKeyMapper()
    original = mapper.convert(gold, test, training)
    leaked = mapper.convert(SenseKey(altered), test, training)

    assert original == leaked


def test_unseen_induced_sense_gives_empty_labels():
    gold, test = bank_keys()
    data = test.to_dict()
    data['bank']['i4'] = {'c9': 1.0}
    test = SenseKey(data)
    training = frozenset(gold.instances()) - {'i4'}

    remapped = GradedReweightedKeyMapper().convert(gold, test, training)
    assert remapped.has_instance('i4')
    assert dict(remapped.labels('i4')) == {}


def test_empty_training_set():
    gold, test = bank_keys()
    remapped = GradedReweightedKeyMapper().convert(gold, test, frozenset())

    assert remapped.instances() == test.instances()
    assert all(not remapped.labels(i) for i in remapped.instances())


def test_test_only_instances_are_kept():
    gold, test = bank_keys()
    data = test.to_dict()
    data['bank']['extra'] = {'c1': 1.0}
    test = SenseKey(data)

    remapped = GradedReweightedKeyMapper().convert(gold, test, frozenset(gold.instances()))
    assert dict(remapped.labels('extra')) == pytest.approx({'A': 1.0})


def test_min_weight_drops_small_senses():
    gold = SenseKey({'bank': {'i1': {'A': 1.0}, 'i2': {'A': 1.0}, 'i3': {'B': 1.0}, 'i4': {}}})
    test = SenseKey({'bank': {i: {'c1': 1.0} for i in ['i1', 'i2', 'i3', 'i4']}})
    mapper = GradedReweightedKeyMapper(min_weight=0.5)

    labels = mapper.convert(gold, test, {'i1', 'i2', 'i3'}).labels('i4')
    assert set(labels) == {'A'}


def test_negative_min_weight_rejected():
    with pytest.raises(ValueError):
        GradedReweightedKeyMapper(min_weight=-0.1)
