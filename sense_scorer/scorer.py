#!/usr/bin/env python3
"""
SenseScorer: Supervised Evaluation of Induced Sense Clusterings
===============================================================

Scores how well an induced sense labelling (the test key) agrees with a
gold sense labelling, when the two keys need not share a sense inventory.

The evaluation is a k-fold cross-validation over the gold instances:

  1. Split the gold instances into k folds (deterministic, seeded shuffle).
  2. For each fold, learn a mapping from induced senses to gold senses on
     the other k-1 folds and relabel the test key with it.
  3. Score the held-out fold's instances with an agreement metric.
  4. Merge the per-instance scores; each instance is held out, and so
     scored, exactly once.
  5. Aggregate per term and overall into average score, recall and F-score.

Because the mapping for a fold never sees that fold's gold labels, the
reported agreement is not inflated by the remapping.

Basic Usage:
    >>> from sense_scorer import Scorer
    >>> scorer = Scorer('jaccard')
    >>> report = scorer.score_files("gold.key", "induced.key")
    >>> print_report(report)
    >>> report.overall.fscore
    0.5412...

    # Test key already uses gold sense ids
    >>> Scorer('wndc', perform_remapping=False).score(gold, test)
"""

import math
import sys
import warnings
from contextlib import nullcontext
from dataclasses import dataclass, field
from pathlib import Path
from typing import AbstractSet, Dict, List, Mapping, Optional, TextIO, Union

from .folds import DEFAULT_N_FOLDS, DEFAULT_SEED, Fold, FoldPartitioner
from .key import SenseKey, load_key, term_sense_counts, write_key
from .metrics import Evaluation, get_metric
from .remapping import GradedReweightedKeyMapper, IdentityMapper, KeyMapper


__all__ = [
    'Scorer',
    'TermScore',
    'ScoreReport',
    'NonFiniteScoreError',
    'FoldCollisionError',
    'merge_scores',
    'aggregate',
    'f_score',
    'print_report',
    'check_sense_inventories',
]


class NonFiniteScoreError(ArithmeticError):
    """A metric produced NaN or infinity, or an average came out non-finite."""


class FoldCollisionError(RuntimeError):
    """An instance was scored in more than one fold."""


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class TermScore:
    """
    Aggregate scores for one term (or for the whole key).

    Attributes:
        term: Term name, ``all`` for the aggregate row
        average: Mean score over the scored instances (0 if none)
        recall: Scored instances / gold instances
        fscore: Harmonic mean of average and recall
        n_scored: Number of instances that received a score
        n_instances: Number of gold instances
    """
    term: str
    average: float
    recall: float
    fscore: float
    n_scored: int = 0
    n_instances: int = 0

    def row(self) -> str:
        """Tab-separated report line."""
        return f"{self.term}\t{self.average}\t{self.recall}\t{self.fscore}"


@dataclass
class ScoreReport:
    """Per-term scores in gold-key order plus the overall row."""
    terms: List[TermScore] = field(default_factory=list)
    overall: Optional[TermScore] = None
    instance_scores: Dict[str, float] = field(default_factory=dict, repr=False)

    @property
    def fscore(self) -> float:
        return self.overall.fscore

    def get(self, term: str) -> Optional[TermScore]:
        for ts in self.terms:
            if ts.term == term:
                return ts
        return None

    def summary_dict(self) -> dict:
        """Plain-dict view, e.g. for JSON export."""
        def as_dict(ts):
            return {
                'average': ts.average,
                'recall': ts.recall,
                'fscore': ts.fscore,
                'n_scored': ts.n_scored,
                'n_instances': ts.n_instances,
            }
        return {
            'terms': {ts.term: as_dict(ts) for ts in self.terms},
            'all': as_dict(self.overall),
        }


# =============================================================================
# Merging and Aggregation
# =============================================================================

def merge_scores(
    instance_scores: Dict[str, float],
    fold_scores: Mapping[str, float],
    held_out: AbstractSet[str],
    fold_index: int = None
) -> None:
    """
    Add one fold's scores to the running instance -> score map.

    Raises:
        ValueError: the metric scored an instance that was not held out
        FoldCollisionError: an instance already has a score
    """
    for instance, score in fold_scores.items():
        if instance not in held_out:
            raise ValueError(
                f"Metric scored instance '{instance}' outside held-out fold {fold_index}"
            )
        if instance in instance_scores:
            raise FoldCollisionError(
                f"Instance '{instance}' scored twice (again in fold {fold_index})"
            )
        instance_scores[instance] = score


def f_score(average: float, recall: float) -> float:
    """Harmonic mean of average score and recall; 0 when both are 0."""
    if average + recall > 0:
        return (2 * average * recall) / (average + recall)
    return 0.0


def _check_finite(value: float, what: str) -> None:
    if math.isnan(value) or math.isinf(value):
        raise NonFiniteScoreError(f"{what} is not finite: {value}")


def aggregate(gold: SenseKey, instance_scores: Mapping[str, float]) -> ScoreReport:
    """
    Roll instance scores up into per-term and overall figures.

    Instances with no score count against recall. Terms are reported in
    gold-key order.

    Raises:
        NonFiniteScoreError: a score or an average is NaN or infinite
    """
    report = ScoreReport(instance_scores=dict(instance_scores))
    all_scores_sum = 0.0
    num_answered = 0

    for term, instances in gold.items():
        scores = []
        for instance in instances:
            if instance in instance_scores:
                score = instance_scores[instance]
                _check_finite(score, f"Score of instance '{instance}'")
                scores.append(score)
        total = sum(scores)

        n_instances = len(instances)
        recall = len(scores) / n_instances if n_instances else 0.0
        average = total / len(scores) if scores else 0.0
        _check_finite(average, f"Average score of term '{term}'")

        report.terms.append(TermScore(
            term=term,
            average=average,
            recall=recall,
            fscore=f_score(average, recall),
            n_scored=len(scores),
            n_instances=n_instances,
        ))
        all_scores_sum += total
        num_answered += len(scores)

    n_gold = gold.num_instances()
    average = all_scores_sum / num_answered if num_answered else 0.0
    recall = num_answered / n_gold if n_gold else 0.0
    _check_finite(average, "Overall average score")

    report.overall = TermScore(
        term='all',
        average=average,
        recall=recall,
        fscore=f_score(average, recall),
        n_scored=num_answered,
        n_instances=n_gold,
    )
    return report


# =============================================================================
# Report
# =============================================================================

BANNER = '=' * 67
RULE = '-' * 67


def print_report(report: ScoreReport, stream: TextIO = None) -> None:
    """Print the per-term table and the overall row."""
    stream = stream or sys.stdout
    print(BANNER, file=stream)
    print("term\taverage_score\trecall\tf-score", file=stream)
    print(RULE, file=stream)
    for ts in report.terms:
        print(ts.row(), file=stream)
    print(RULE, file=stream)
    print(report.overall.row(), file=stream)
    print(BANNER, file=stream)


# =============================================================================
# Sanity Checks
# =============================================================================

def check_sense_inventories(gold: SenseKey, test: SenseKey, perform_remapping: bool) -> None:
    """
    Warn when the remapping setting looks wrong for the keys given.

    Remapping a test key that already uses most of the gold sense ids, or
    not remapping one that shares none of them, is usually a mistake.
    """
    gold_senses = gold.all_senses()
    if not gold_senses:
        return
    shared = len(gold_senses & test.all_senses()) / len(gold_senses)

    if perform_remapping and shared > 0.75:
        warnings.warn(
            "The test key uses the same sense ids as the gold key, but its "
            "labels are being remapped. Did you mean to use --no-remapping?"
        )
    elif not perform_remapping and shared == 0:
        warnings.warn(
            "The test key shares no sense ids with the gold key, but its "
            "labels are not being remapped into the gold sense inventory."
        )


# =============================================================================
# Scorer
# =============================================================================

class Scorer:
    """
    Cross-validated supervised scorer for induced sense keys.

    The agreement metric and the remapping strategy are plugged in at
    construction time.

    Example:
        >>> scorer = Scorer(GoodmanKruskalGamma(), n_folds=5)
        >>> report = scorer.score(gold, test, output_path="remapped.key")
        >>> report.get('bank.n').recall
        1.0
    """

    def __init__(
        self,
        evaluation: Union[Evaluation, str] = 'jaccard',
        mapper: KeyMapper = None,
        n_folds: int = DEFAULT_N_FOLDS,
        seed: int = DEFAULT_SEED,
        perform_remapping: bool = True,
        verbose: bool = False
    ):
        """
        Initialize the scorer.

        Args:
            evaluation: Metric instance, or its registry name
            mapper: Remapping strategy (default: GradedReweightedKeyMapper)
            n_folds: Number of cross-validation folds
            seed: Seed of the fold shuffle
            perform_remapping: Relabel the test key into the gold inventory.
                               When False the test key is scored as is.
            verbose: Print progress messages to stderr
        """
        if isinstance(evaluation, str):
            evaluation = get_metric(evaluation)
        self.evaluation = evaluation
        self.perform_remapping = perform_remapping
        if not perform_remapping:
            self.mapper = IdentityMapper()
        else:
            self.mapper = mapper if mapper is not None else GradedReweightedKeyMapper()
        self.partitioner = FoldPartitioner(n_folds=n_folds, seed=seed)
        self.verbose = verbose

    @property
    def n_folds(self) -> int:
        return self.partitioner.n_folds

    # =========================================================================
    # Scoring
    # =========================================================================

    def score_files(
        self,
        gold_path: Union[str, Path],
        test_path: Union[str, Path],
        output_path: Union[str, Path] = None
    ) -> ScoreReport:
        """Load both key files and score them."""
        gold = load_key(gold_path)
        test = load_key(test_path)
        if self.verbose:
            print(f"Loaded {gold.num_instances():,} gold instances "
                  f"and {test.num_instances():,} test instances", file=sys.stderr)
        return self.score(gold, test, output_path=output_path)

    def score(
        self,
        gold: SenseKey,
        test: SenseKey,
        output_path: Union[str, Path] = None
    ) -> ScoreReport:
        """
        Score ``test`` against ``gold``.

        Args:
            gold: Gold key
            test: Induced key
            output_path: If given, the remapped test key is written here,
                         each gold instance labelled by the mapping of the
                         fold that held it out. Test instances missing from
                         the gold key are never scored; they are appended
                         last, labelled by a mapping fitted on all gold
                         instances.

        Returns:
            ScoreReport
        """
        check_sense_inventories(gold, test, self.perform_remapping)

        folds = self.partitioner.partition(gold.instances())
        counts = term_sense_counts(gold)
        instance_scores = self.run_folds(gold, test, folds, counts, output_path)

        report = aggregate(gold, instance_scores)
        if self.verbose:
            print(f"Scored {report.overall.n_scored:,}/{report.overall.n_instances:,} "
                  f"instances with {self.evaluation.name}", file=sys.stderr)
        return report

    def run_folds(
        self,
        gold: SenseKey,
        test: SenseKey,
        folds: List[Fold],
        counts: Mapping[str, int],
        output_path: Union[str, Path] = None
    ) -> Dict[str, float]:
        """
        Remap and score every fold in order, merging the instance scores.

        Returns:
            Dict mapping instance -> score, for instances the metric scored
        """
        universe = frozenset(gold.instances())
        instance_scores: Dict[str, float] = {}

        writer = open(output_path, 'w', encoding='utf-8') if output_path else nullcontext()
        with writer as out:
            for fold in folds:
                # The mapper only gets to see this fold's training instances
                remapped = self.mapper.convert(gold, test, fold.train)

                held_out = universe - fold.train
                if out is not None:
                    write_key(remapped.restrict(held_out), out)

                scores = self.evaluation.test(remapped, gold, held_out, counts)
                merge_scores(instance_scores, scores, held_out, fold.index)

                if self.verbose:
                    print(f"  Fold {fold.index + 1}/{len(folds)}: "
                          f"train={len(fold.train):,} held-out={len(held_out):,} "
                          f"scored={len(scores):,}", file=sys.stderr)

            if out is not None:
                extra = [i for i in test.instances() if i not in universe]
                if extra:
                    remapped = self.mapper.convert(gold, test, universe)
                    write_key(remapped.restrict(extra), out)

        return instance_scores

    def __repr__(self) -> str:
        return (f"Scorer(evaluation={self.evaluation!r}, mapper={self.mapper!r}, "
                f"n_folds={self.n_folds}, seed={self.partitioner.seed})")
