#!/usr/bin/env python3
"""
Sense Keys for SenseScorer
==========================

In-memory representation of a sense key plus the reader and writer for
the key file format.

A key maps each term to its instances, and each instance to a weighted
set of sense labels:

    term -> instance -> sense -> weight

Weights are non-negative reals, so an instance may carry several senses
at once (graded / soft labelling). Every instance belongs to exactly one
term.

Key file format (one instance per line):

    term instance sense1/weight1 sense2/weight2 ...

A sense written without a ``/weight`` suffix gets weight 1.0. Blank lines
and lines starting with ``#`` are skipped.

Usage:
    >>> from sense_scorer.key import load_key
    >>> gold = load_key("gold.key")
    >>> gold.instances()[:3]
    ['bank.n.1', 'bank.n.2', 'bank.n.3']
    >>> gold.senses("bank.n")
    {'bank%1:14:00::', 'bank%1:17:01::'}
"""

import math
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Optional, Set, TextIO, Union


__all__ = [
    'SenseKey',
    'KeyFormatError',
    'parse_key',
    'load_key',
    'write_key',
    'save_key',
    'term_sense_counts',
]


class KeyFormatError(ValueError):
    """A key file line that cannot be loaded."""

    def __init__(self, message: str, line_number: int = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


# =============================================================================
# Key Model
# =============================================================================

class SenseKey(Mapping):
    """
    Read-only term -> instance -> sense -> weight mapping.

    Terms and instances keep the order in which they were added, which is
    the order the scorer uses to build folds and to print the report.

    Example:
        >>> key = SenseKey({'bank': {'i1': {'A': 1.0}, 'i2': {'B': 0.5, 'A': 0.5}}})
        >>> key.instances()
        ['i1', 'i2']
        >>> key.senses('bank')
        {'A', 'B'}
        >>> key.labels('i2')
        mappingproxy({'B': 0.5, 'A': 0.5})
    """

    def __init__(self, data: Mapping = None):
        self._terms = {}
        self._instance_to_term = {}

        for term, instances in (data or {}).items():
            term_map = {}
            for instance, senses in instances.items():
                if instance in self._instance_to_term:
                    raise ValueError(
                        f"Instance '{instance}' appears under both "
                        f"'{self._instance_to_term[instance]}' and '{term}'"
                    )
                self._instance_to_term[instance] = term
                term_map[instance] = MappingProxyType(
                    {sense: float(weight) for sense, weight in senses.items()}
                )
            self._terms[term] = MappingProxyType(term_map)

    # ── Mapping protocol ───────────────────────────────────────────────

    def __getitem__(self, term: str) -> Mapping:
        return self._terms[term]

    def __iter__(self) -> Iterator[str]:
        return iter(self._terms)

    def __len__(self) -> int:
        return len(self._terms)

    # ── Derived views ──────────────────────────────────────────────────

    def terms(self) -> List[str]:
        """Terms in key order."""
        return list(self._terms)

    def instances(self) -> List[str]:
        """All instance ids, term by term, in key order."""
        return list(self._instance_to_term)

    def num_instances(self) -> int:
        return len(self._instance_to_term)

    def __contains__(self, term) -> bool:
        return term in self._terms

    def has_instance(self, instance: str) -> bool:
        return instance in self._instance_to_term

    def term_of(self, instance: str) -> Optional[str]:
        """Term the instance belongs to, or None if it is not in the key."""
        return self._instance_to_term.get(instance)

    def labels(self, instance: str) -> Mapping:
        """
        Sense -> weight map of one instance.

        Returns an empty mapping for an instance not in the key.
        """
        term = self._instance_to_term.get(instance)
        if term is None:
            return MappingProxyType({})
        return self._terms[term][instance]

    def senses(self, term: str) -> Set[str]:
        """Distinct sense labels used anywhere for ``term``."""
        senses = set()
        for labels in self._terms.get(term, {}).values():
            senses.update(labels)
        return senses

    def all_senses(self) -> Set[str]:
        """Distinct sense labels used anywhere in the key."""
        senses = set()
        for term in self._terms:
            senses.update(self.senses(term))
        return senses

    def restrict(self, instances: Iterable[str]) -> 'SenseKey':
        """New key holding only ``instances`` (key order is kept)."""
        keep = set(instances)
        data = {}
        for term, term_map in self._terms.items():
            kept = {i: labels for i, labels in term_map.items() if i in keep}
            if kept:
                data[term] = kept
        return SenseKey(data)

    def to_dict(self) -> Dict[str, Dict[str, Dict[str, float]]]:
        """Plain nested-dict copy of the key."""
        return {
            term: {i: dict(labels) for i, labels in term_map.items()}
            for term, term_map in self._terms.items()
        }

    def __eq__(self, other) -> bool:
        if isinstance(other, SenseKey):
            return self.to_dict() == other.to_dict()
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        return f"SenseKey(terms={len(self._terms)}, instances={len(self._instance_to_term)})"


def term_sense_counts(gold: SenseKey) -> Dict[str, int]:
    """
    Number of distinct senses each term uses in the gold key.

    The gold labelling is the only estimate of a term's sense inventory
    available to the scorer.
    """
    return {term: len(gold.senses(term)) for term in gold}


# =============================================================================
# Reading
# =============================================================================

def _parse_sense(token: str, line_number: int):
    sense, sep, weight_str = token.rpartition('/')
    if not sep:
        return token, 1.0
    if not sense:
        raise KeyFormatError(f"missing sense label in '{token}'", line_number)
    try:
        weight = float(weight_str)
    except ValueError:
        raise KeyFormatError(f"bad weight in '{token}'", line_number) from None
    if not math.isfinite(weight) or weight < 0:
        raise KeyFormatError(f"weight must be finite and non-negative in '{token}'", line_number)
    return sense, weight


def parse_key(lines: Iterable[str]) -> SenseKey:
    """
    Build a SenseKey from key-format lines.

    Args:
        lines: Iterable of text lines (e.g. an open file)

    Returns:
        SenseKey

    Raises:
        KeyFormatError: malformed line, bad weight, or an instance filed
                        under two different terms
    """
    data = {}
    instance_to_term = {}

    for line_number, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith('#'):
            continue

        tokens = line.split()
        if len(tokens) < 2:
            raise KeyFormatError("expected 'term instance [sense/weight ...]'", line_number)

        term, instance = tokens[0], tokens[1]
        owner = instance_to_term.setdefault(instance, term)
        if owner != term:
            raise KeyFormatError(
                f"instance '{instance}' already listed under term '{owner}'", line_number
            )

        senses = data.setdefault(term, {}).setdefault(instance, {})
        for token in tokens[2:]:
            sense, weight = _parse_sense(token, line_number)
            senses[sense] = weight

    return SenseKey(data)


def load_key(path: Union[str, Path]) -> SenseKey:
    """Load a key file from disk."""
    with open(path, 'r', encoding='utf-8') as f:
        return parse_key(f)


# =============================================================================
# Writing
# =============================================================================

def write_key(key: SenseKey, stream: TextIO) -> None:
    """Write ``key`` to an open text stream, one instance per line."""
    for term, instances in key.items():
        for instance, senses in instances.items():
            parts = [term, instance]
            parts.extend(f"{sense}/{weight!r}" for sense, weight in senses.items())
            stream.write(' '.join(parts) + '\n')


def save_key(key: SenseKey, path: Union[str, Path]) -> None:
    """Write ``key`` to a file."""
    with open(path, 'w', encoding='utf-8') as f:
        write_key(key, f)
