'''Immutable vote tally operations.

A tally is a dictionary mapping candidate identifiers to the number of votes
they received. The functions here never modify the tallies they are given;
they always build new ones, which is also how an election session updates
its own tally.
'''

import logging
import collections.abc
from numbers import Number
from typing import Any, Dict, Iterable

import tallylib.util
from tallylib.util import is_finite_number, is_hashable


def tally_pure(current_tally: Any, candidate_id: Any) -> Dict[Any, Number]:
    '''Return a new tally with one more vote for the candidate.

    :param current_tally: The tally to start from. It is not modified.
        Anything that is not a mapping is treated as an empty tally.
    :param candidate_id: Identifier of the candidate voted for. A candidate
        missing from the tally (or with a non-numeric count) starts from zero.
        An identifier that cannot be a dictionary key is not counted.
    :returns: A new dictionary with the incremented count.
    '''
    if isinstance(current_tally, collections.abc.Mapping):
        updated = dict(current_tally)
    else:
        updated = {}
    if not is_hashable(candidate_id):
        logging.warning("cannot count a vote for %r", candidate_id)
        return updated
    previous = updated.get(candidate_id, 0)
    if not is_finite_number(previous):
        previous = 0
    updated[candidate_id] = previous + 1
    return updated


def total_votes(tally: Any) -> Number:
    '''Return the sum of all numeric counts in the tally.'''
    if not isinstance(tally, collections.abc.Mapping):
        return 0
    return sum(n for n in tally.values() if is_finite_number(n))


def merge_tallies(tallies: Iterable[Dict[Any, Number]]) -> Dict[Any, Number]:
    '''Sum several tallies (e.g. from separate polling stations) into one.

    The result is ordered by descending count. Non-mapping items are
    ignored.
    '''
    merged = {}
    for tally in tallies:
        if isinstance(tally, collections.abc.Mapping):
            merged = tallylib.util.sum_dicts(merged, {
                cand: n for cand, n in tally.items() if is_finite_number(n)
            })
    return tallylib.util.descending_dict(merged)
