'''Candidate and voter specifications.

Contains the value objects that are passed into an election session:
:class:`Candidate` (someone standing in the election) and :class:`Voter`
(someone wishing to register to vote). Both are frozen once created.

Sessions accept candidates either as :class:`Candidate` instances or as
JSON-like mappings with ``id``, ``name`` and ``party`` keys; the conversion is
done by :func:`as_candidate`. Voters may be any record (see
:func:`tallylib.util.is_record`); the :class:`Voter` class is merely a
convenient, frozen form of one.
'''

from __future__ import annotations

import logging
import dataclasses
import collections.abc
from numbers import Real
from typing import Any, List, Optional

from tallylib.util import is_record, get_field


class CandidateError(Exception):
    '''A candidate is invalid in the given context.

    :param candidate: Candidate that was found to be invalid.
    :param expected: Definition of a candidate that was expected.
    '''
    def __init__(self, candidate: Any, expected: Any = None):
        self.candidate = candidate
        self.expected = expected
        message = f'invalid candidate: {candidate!r}'
        if expected:
            message += f', must be {expected}'
        super().__init__(message)


@dataclasses.dataclass(frozen=True)
class Candidate:
    '''A person standing for the election.

    Candidates are identified by their ``id``; two candidates with the same
    identifier should not appear in a single election.

    :param id: Unique identifier of the candidate within the election.
    :param name: Name of the candidate, in any customary text format.
    :param party: The party the candidate is standing for; empty for
        independents.
    '''
    id: str
    name: str = ''
    party: str = ''

    def __post_init__(self):
        if not isinstance(self.id, str):
            raise CandidateError(self.id, 'a string identifier')


@dataclasses.dataclass(frozen=True)
class Voter:
    '''A person applying to register as a voter.

    No checks are done on construction; eligibility is decided by the
    election session or by a :class:`tallylib.validate.VoteValidator`.

    :param id: Unique identifier of the voter.
    :param name: Name of the voter.
    :param age: Age of the voter in years.
    '''
    id: str
    name: str = ''
    age: Optional[Real] = None


def as_candidate(value: Any) -> Candidate:
    '''Convert a candidate-like record to a :class:`Candidate`.

    :param value: A candidate object or a record with an ``id`` field and
        optional ``name`` and ``party`` fields.
    :raises CandidateError: If the value has no string identifier.
    '''
    if isinstance(value, Candidate):
        return value
    elif not is_record(value):
        raise CandidateError(value, 'a candidate record')
    return Candidate(
        id=get_field(value, 'id'),
        name=get_field(value, 'name', ''),
        party=get_field(value, 'party', ''),
    )


def as_candidate_list(candidates: Any) -> List[Candidate]:
    '''Convert a sequence of candidate-like records to candidates.

    Anything that is not a sequence gives an empty list. Items that cannot
    be converted are skipped.
    '''
    if (not isinstance(candidates, collections.abc.Sequence)
            or isinstance(candidates, (str, bytes))):
        if candidates is not None:
            logging.warning("candidate list expected, got %r", candidates)
        return []
    converted = []
    for item in candidates:
        try:
            converted.append(as_candidate(item))
        except CandidateError as err:
            logging.warning("skipping candidate: %s", err)
    return converted
