#!/usr/bin/env python3
"""
Sense Remapping for SenseScorer
===============================

Translates an induced (test) key into the gold key's sense inventory.

An induced clustering labels instances with its own cluster ids
(``c1``, ``c2``, ...), which mean nothing to the gold key. A mapper
learns how induced senses line up with gold senses and relabels every
test instance with gold senses.

The scorer calls a mapper once per fold with that fold's training set.
A mapper must learn its correspondence from those instances alone; the
held-out instances it later relabels are the ones being scored.

Mappers:
  - IdentityMapper:            no remapping (test key already uses gold ids)
  - GradedReweightedKeyMapper: graded mapping estimated from co-occurring
                               sense weights on the training instances

Usage:
    >>> mapper = GradedReweightedKeyMapper()
    >>> remapped = mapper.convert(gold, test, fold.train)
"""

from typing import AbstractSet, Dict, List

import numpy as np

from .key import SenseKey


__all__ = [
    'KeyMapper',
    'IdentityMapper',
    'GradedReweightedKeyMapper',
]


class KeyMapper:
    """
    Base class for sense remapping strategies.

    Subclasses implement ``convert``, which must return a key covering the
    same instances as ``test`` and must only consult gold and test labels
    of ``training_instances`` when deciding the mapping.
    """

    name = 'base'

    def convert(
        self,
        gold: SenseKey,
        test: SenseKey,
        training_instances: AbstractSet[str]
    ) -> SenseKey:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class IdentityMapper(KeyMapper):
    """Pass the test key through unchanged."""

    name = 'identity'

    def convert(self, gold, test, training_instances):
        return test


class GradedReweightedKeyMapper(KeyMapper):
    """
    Graded mapping from induced senses to gold senses.

    For each term, a matrix M is accumulated over the training instances
    that both keys label:

        M[c, s] += t(c) * g(s)

    where t and g are the test and gold weights of the instance. Each row
    is normalised into P(s | c). A test instance is then relabelled as

        w(s) = sum_c t(c) * P(s | c)

    and rescaled so that its total weight equals its original total test
    weight. Induced senses never seen in training contribute nothing; an
    instance with no usable induced sense keeps an empty sense map.
    """

    name = 'graded-reweighted'

    def __init__(self, min_weight: float = 0.0):
        """
        Args:
            min_weight: Gold senses whose remapped weight does not exceed
                        this value are dropped from an instance
        """
        if min_weight < 0:
            raise ValueError(f"min_weight must be non-negative, got {min_weight}")
        self.min_weight = min_weight

    def mapping_matrix(
        self,
        gold: SenseKey,
        test: SenseKey,
        term: str,
        training_instances: AbstractSet[str]
    ):
        """
        Estimate P(gold sense | induced sense) for one term.

        Returns:
            (induced senses, gold senses, row-normalised matrix)
        """
        induced_index: Dict[str, int] = {}
        gold_index: Dict[str, int] = {}
        pairs = []

        for instance, test_labels in test.get(term, {}).items():
            if instance not in training_instances or not gold.has_instance(instance):
                continue
            gold_labels = gold.labels(instance)
            for c in test_labels:
                induced_index.setdefault(c, len(induced_index))
            for s in gold_labels:
                gold_index.setdefault(s, len(gold_index))
            pairs.append((test_labels, gold_labels))

        matrix = np.zeros((len(induced_index), len(gold_index)))
        for test_labels, gold_labels in pairs:
            for c, t in test_labels.items():
                for s, g in gold_labels.items():
                    matrix[induced_index[c], gold_index[s]] += t * g

        row_sums = matrix.sum(axis=1, keepdims=True)
        np.divide(matrix, row_sums, out=matrix, where=row_sums > 0)

        return list(induced_index), list(gold_index), matrix

    def convert(self, gold, test, training_instances):
        training_instances = frozenset(training_instances)
        remapped = {}

        for term, instances in test.items():
            induced, gold_senses, matrix = self.mapping_matrix(
                gold, test, term, training_instances
            )
            induced_index = {c: i for i, c in enumerate(induced)}

            term_map = {}
            for instance, test_labels in instances.items():
                term_map[instance] = self._relabel(
                    test_labels, induced_index, gold_senses, matrix
                )
            remapped[term] = term_map

        return SenseKey(remapped)

    def _relabel(self, test_labels, induced_index, gold_senses: List[str], matrix) -> Dict[str, float]:
        weights = np.zeros(len(gold_senses))
        for c, t in test_labels.items():
            row = induced_index.get(c)
            if row is not None:
                weights += t * matrix[row]

        total = weights.sum()
        if total <= 0:
            return {}

        # keep the instance's original amount of weight
        weights *= sum(test_labels.values()) / total

        return {
            s: float(w) for s, w in zip(gold_senses, weights)
            if w > self.min_weight
        }

    def __repr__(self) -> str:
        return f"GradedReweightedKeyMapper(min_weight={self.min_weight})"
