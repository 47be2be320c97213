"""
SenseScorer: Supervised Evaluation of Word Sense Induction
==========================================================

Scores an induced sense labelling against a gold sense labelling when
the two keys use different sense inventories.

The induced senses are mapped into the gold inventory with k-fold cross
validation: the mapping used for a fold is learned on the other folds,
so scores are never inflated by labels the mapping has already seen.

Components:
  - SenseKey / load_key:   term -> instance -> sense -> weight keys
  - FoldPartitioner:       deterministic, seeded k-fold split
  - KeyMapper:             remapping strategies (graded, identity)
  - Evaluation:            agreement metrics (jaccard, gamma, wndc)
  - Scorer:                fold orchestration and aggregation

Basic Usage:
    >>> from sense_scorer import Scorer, print_report
    >>> report = Scorer('jaccard').score_files("gold.key", "induced.key")
    >>> print_report(report)
    >>> report.overall.fscore

    # Command line
    $ sense-scorer gold.key induced.key remapped.key
"""

from .key import (
    SenseKey,
    KeyFormatError,
    parse_key,
    load_key,
    write_key,
    save_key,
    term_sense_counts
)

from .folds import (
    Fold,
    FoldPartitioner,
    DEFAULT_N_FOLDS,
    DEFAULT_SEED
)

from .remapping import (
    KeyMapper,
    IdentityMapper,
    GradedReweightedKeyMapper
)

from .metrics import (
    Evaluation,
    JaccardIndex,
    GoodmanKruskalGamma,
    WeightedNDCG,
    METRICS,
    get_metric
)

from .scorer import (
    Scorer,
    TermScore,
    ScoreReport,
    NonFiniteScoreError,
    FoldCollisionError,
    aggregate,
    f_score,
    print_report,
    check_sense_inventories
)

__version__ = "0.2.0"
__all__ = [
    # Keys
    'SenseKey',
    'KeyFormatError',
    'parse_key',
    'load_key',
    'write_key',
    'save_key',
    'term_sense_counts',
    # Folds
    'Fold',
    'FoldPartitioner',
    'DEFAULT_N_FOLDS',
    'DEFAULT_SEED',
    # Remapping
    'KeyMapper',
    'IdentityMapper',
    'GradedReweightedKeyMapper',
    # Metrics
    'Evaluation',
    'JaccardIndex',
    'GoodmanKruskalGamma',
    'WeightedNDCG',
    'METRICS',
    'get_metric',
    # Scoring
    'Scorer',
    'TermScore',
    'ScoreReport',
    'NonFiniteScoreError',
    'FoldCollisionError',
    'aggregate',
    'f_score',
    'print_report',
    'check_sense_inventories',
]
