#!/usr/bin/env python3
"""
Fold Partitioning for SenseScorer
=================================

Deterministic k-fold split of the gold instances.

Every instance is given a position in gold-key order, the positions are
shuffled with a seeded permutation, and the instance at shuffled
position p goes to fold ``p % k``. Fold j is held out for scoring in
round j; its training set (the instances the remapping may learn from)
is everything else.

The permutation comes from numpy's legacy ``RandomState``, whose stream
is frozen, so a given seed and instance count always produce the same
folds on every platform.

Usage:
    >>> from sense_scorer.folds import FoldPartitioner
    >>> folds = FoldPartitioner(n_folds=5, seed=42).partition(gold.instances())
    >>> [len(f.test) for f in folds]
    [20, 20, 20, 20, 20]
"""

from dataclasses import dataclass
from typing import FrozenSet, List, Sequence

import numpy as np


DEFAULT_N_FOLDS = 5
DEFAULT_SEED = 42


@dataclass(frozen=True)
class Fold:
    """
    One round of the cross-validation.

    Attributes:
        index: Fold number (0-based)
        test: Held-out instances scored in this round
        train: All other instances; the only ones the remapping may see
    """
    index: int
    test: FrozenSet[str]
    train: FrozenSet[str]

    def __len__(self) -> int:
        return len(self.test)


class FoldPartitioner:
    """
    Split an ordered instance universe into k disjoint folds.

    Args:
        n_folds: Number of folds (k >= 1). With k=1 the single training
                 set is empty and every instance is held out.
        seed: Seed of the shuffle
    """

    def __init__(self, n_folds: int = DEFAULT_N_FOLDS, seed: int = DEFAULT_SEED):
        if n_folds < 1:
            raise ValueError(f"n_folds must be at least 1, got {n_folds}")
        self.n_folds = n_folds
        self.seed = seed

    def permutation(self, n: int) -> np.ndarray:
        """Shuffled positions 0..n-1 (same output for the same seed and n)."""
        # fresh generator each call so repeated partitions agree
        return np.random.RandomState(self.seed).permutation(n)

    def assign(self, instances: Sequence[str]) -> List[List[str]]:
        """
        Fold membership of each instance.

        Returns:
            k lists of instance ids; list j holds fold j in shuffled order
        """
        assignments = [[] for _ in range(self.n_folds)]
        for position, index in enumerate(self.permutation(len(instances))):
            assignments[position % self.n_folds].append(instances[index])
        return assignments

    def partition(self, instances: Sequence[str]) -> List[Fold]:
        """
        Build the k folds and their training sets.

        Args:
            instances: The instance universe in gold-key order. Must not
                       contain duplicates.

        Returns:
            Folds in fold order
        """
        instances = list(instances)
        if len(set(instances)) != len(instances):
            raise ValueError("instance universe contains duplicate ids")

        universe = frozenset(instances)
        folds = []
        for j, members in enumerate(self.assign(instances)):
            test = frozenset(members)
            folds.append(Fold(index=j, test=test, train=universe - test))
        return folds

    def __repr__(self) -> str:
        return f"FoldPartitioner(n_folds={self.n_folds}, seed={self.seed})"
