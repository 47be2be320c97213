#!/usr/bin/env python3
"""
Agreement Metrics for SenseScorer
=================================

Per-instance agreement between a (remapped) test key and the gold key.

Every metric follows the same contract:

    test(remapped, gold, instances, term_sense_counts) -> {instance: score}

  - Only instances in ``instances`` are scored.
  - An instance the test key does not label (absent, or with no
    positively weighted sense) is left out of the result. The scorer
    counts these as unanswered, which lowers recall.
  - Scores are finite floats. Inputs are never modified.

Metrics implemented:
  - JaccardIndex:        |G ∩ T| / |G ∪ T| over applicable senses
  - GoodmanKruskalGamma: rank agreement of gold and test sense weights
  - WeightedNDCG:        discounted gain of the test sense ranking,
                         penalised by weight disagreement

Usage:
    >>> from sense_scorer.metrics import get_metric
    >>> metric = get_metric('jaccard')
    >>> scores = metric.test(remapped, gold, fold.test, counts)
"""

import math
from typing import AbstractSet, Dict, Mapping, Type

import numpy as np

from .key import SenseKey


__all__ = [
    'Evaluation',
    'JaccardIndex',
    'GoodmanKruskalGamma',
    'WeightedNDCG',
    'METRICS',
    'get_metric',
]


def _applicable(labels: Mapping) -> Dict[str, float]:
    """Senses with positive weight."""
    return {s: w for s, w in labels.items() if w > 0}


# =============================================================================
# Base Class
# =============================================================================

class Evaluation:
    """
    Base class for per-instance agreement metrics.

    Subclasses implement ``score_instance``; ``test`` handles instance
    selection and the omission of unlabelled instances.
    """

    name = 'base'

    def test(
        self,
        remapped: SenseKey,
        gold: SenseKey,
        instances: AbstractSet[str],
        term_sense_counts: Mapping[str, int]
    ) -> Dict[str, float]:
        """
        Score each requested instance the test key labels.

        Args:
            remapped: Test key in the gold sense inventory
            gold: Gold key
            instances: Instances to score (one held-out fold)
            term_sense_counts: Number of gold senses per term

        Returns:
            Dict mapping instance -> score
        """
        scores = {}
        term_senses = {}
        # gold order keeps results reproducible
        for instance in gold.instances():
            if instance not in instances:
                continue
            test_labels = _applicable(remapped.labels(instance))
            if not test_labels:
                continue
            term = gold.term_of(instance)
            if term not in term_senses:
                term_senses[term] = gold.senses(term)
            gold_labels = _applicable(gold.labels(instance))
            n_senses = term_sense_counts.get(term, len(gold_labels))
            scores[instance] = float(
                self.score_instance(gold_labels, test_labels, term_senses[term], n_senses)
            )
        return scores

    def score_instance(
        self,
        gold_labels: Dict[str, float],
        test_labels: Dict[str, float],
        term_senses: AbstractSet[str],
        n_senses: int
    ) -> float:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


# =============================================================================
# Set Overlap
# =============================================================================

class JaccardIndex(Evaluation):
    """
    Agreement on which senses apply to an instance.

    Weights are ignored; a sense applies when its weight is positive.
    Identical sense sets score 1.0, disjoint sets 0.0.
    """

    name = 'jaccard'

    def score_instance(self, gold_labels, test_labels, term_senses, n_senses):
        gold_set = set(gold_labels)
        test_set = set(test_labels)
        return len(gold_set & test_set) / len(gold_set | test_set)


# =============================================================================
# Rank Correlation
# =============================================================================

class GoodmanKruskalGamma(Evaluation):
    """
    Goodman-Kruskal's gamma between gold and test sense weights.

    The senses compared are the term's gold senses plus any extra senses
    the test key used; a sense an instance does not rate counts as 0.
    For every pair of senses the two keys are concordant if they
    order the pair the same way and discordant if they order it
    oppositely; pairs tied in either key are ignored.

        gamma = (C - D) / (C + D)

    ranges over [-1, 1]. When every pair is tied the score is 0.0.
    """

    name = 'gamma'

    def score_instance(self, gold_labels, test_labels, term_senses, n_senses):
        senses = sorted(set(term_senses) | set(test_labels))

        gold_vec = np.zeros(len(senses))
        test_vec = np.zeros(len(senses))
        for i, s in enumerate(senses):
            gold_vec[i] = gold_labels.get(s, 0.0)
            test_vec[i] = test_labels.get(s, 0.0)

        gold_order = np.sign(gold_vec[:, None] - gold_vec[None, :])
        test_order = np.sign(test_vec[:, None] - test_vec[None, :])
        agreement = np.triu(gold_order * test_order, k=1)

        concordant = int(np.sum(agreement > 0))
        discordant = int(np.sum(agreement < 0))
        if concordant + discordant == 0:
            return 0.0
        return (concordant - discordant) / (concordant + discordant)


# =============================================================================
# Ranking Gain
# =============================================================================

class WeightedNDCG(Evaluation):
    """
    Weighted normalised discounted cumulative gain.

    Test senses are ranked by weight (ties broken by label) and cut off
    at the term's sense count. A sense at rank i earns

        g(s) * min(t(s), g(s)) / max(t(s), g(s)) / log2(i + 1)

    so a correct sense with the wrong weight earns only part of its gold
    weight. The sum is normalised by the DCG of the gold ranking, giving
    a score in [0, 1]; 0.0 when the instance has no gold sense.
    """

    name = 'wndc'

    def score_instance(self, gold_labels, test_labels, term_senses, n_senses):
        cutoff = max(n_senses, 1)
        ranking = sorted(test_labels.items(), key=lambda x: (-x[1], x[0]))[:cutoff]

        dcg = 0.0
        for rank, (sense, t) in enumerate(ranking, start=1):
            g = gold_labels.get(sense, 0.0)
            if g > 0:
                dcg += g * (min(t, g) / max(t, g)) / math.log2(rank + 1)

        ideal = sorted(gold_labels.values(), reverse=True)[:cutoff]
        idcg = sum(g / math.log2(rank + 1) for rank, g in enumerate(ideal, start=1))

        return dcg / idcg if idcg > 0 else 0.0


# =============================================================================
# Registry
# =============================================================================

METRICS: Dict[str, Type[Evaluation]] = {
    JaccardIndex.name: JaccardIndex,
    GoodmanKruskalGamma.name: GoodmanKruskalGamma,
    WeightedNDCG.name: WeightedNDCG,
}


def get_metric(name: str) -> Evaluation:
    """Instantiate a metric by its registry name."""
    try:
        return METRICS[name]()
    except KeyError:
        raise ValueError(f"Unknown metric '{name}'. Available: {sorted(METRICS)}") from None
