'''Election sessions: voter registration, vote casting and results.

An :class:`ElectionSession` is created once per election from a fixed list of
candidates. Each voter then goes through the following states:

-   *unregistered* - the initial state,
-   *registered* - after a successful :meth:`ElectionSession.register_voter`
    call (the voter must be at least of voting age),
-   *voted* - after a successful :meth:`ElectionSession.cast_vote` call.
    This state is final; nobody can vote twice in one session.

The registered voters, the voters who voted and the vote tally are private
to the session and only change through those two methods. None of the
session operations raise on malformed input: registration reports failure
as False and vote casting returns a :class:`VoteRejected` result with one of
the reason codes :data:`VOTER_NOT_REGISTERED`, :data:`CANDIDATE_NOT_FOUND`
or :data:`ALREADY_VOTED`.
'''

from __future__ import annotations

import logging
import functools
import threading
from fractions import Fraction
from numbers import Number
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple, \
    Union

import tallylib.tally
from tallylib.candidate import Candidate, as_candidate_list
from tallylib.util import is_record, get_field, is_finite_number, \
    is_hashable


VOTING_AGE = 18

VOTER_NOT_REGISTERED = 'voter_not_registered'
CANDIDATE_NOT_FOUND = 'candidate_not_found'
ALREADY_VOTED = 'already_voted'


class VoteAccepted:
    '''A vote that was recorded.

    Truthy, unlike :class:`VoteRejected`.

    :param voter_id: Identifier of the voter who voted.
    :param candidate_id: Identifier of the candidate voted for.
    '''
    accepted = True
    reason = None

    def __init__(self, voter_id: str, candidate_id: str):
        self.voter_id = voter_id
        self.candidate_id = candidate_id

    def __bool__(self) -> bool:
        return True

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, VoteAccepted):
            return (
                (self.voter_id, self.candidate_id)
                == (other.voter_id, other.candidate_id)
            )
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.voter_id, self.candidate_id))

    def to_dict(self) -> Dict[str, str]:
        return {'voter_id': self.voter_id, 'candidate_id': self.candidate_id}

    def dispatch(self,
                 on_success: Optional[Callable[[Dict[str, str]], Any]] = None,
                 on_error: Optional[Callable[[str], Any]] = None,
                 ) -> Any:
        '''Pass the vote record to the success callback.

        :returns: What the callback returns, None if there is no callback.
        '''
        if on_success is None:
            return None
        return on_success(self.to_dict())

    def __repr__(self) -> str:
        return f'<VoteAccepted({self.voter_id},{self.candidate_id})>'


class VoteRejected:
    '''A vote that was refused by the session.

    :param reason: Reason code of the refusal.
    '''
    accepted = False

    def __init__(self, reason: str):
        self.reason = reason

    def __bool__(self) -> bool:
        return False

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, VoteRejected):
            return self.reason == other.reason
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.reason)

    def dispatch(self,
                 on_success: Optional[Callable[[Dict[str, str]], Any]] = None,
                 on_error: Optional[Callable[[str], Any]] = None,
                 ) -> Any:
        '''Pass the reason code to the error callback.

        :returns: What the callback returns, None if there is no callback.
        '''
        if on_error is None:
            return None
        return on_error(self.reason)

    def __repr__(self) -> str:
        return f'<VoteRejected({self.reason})>'


CastResult = Union[VoteAccepted, VoteRejected]


class CandidateResult:
    '''A single row of election results.

    :param id: Identifier of the candidate.
    :param name: Name of the candidate.
    :param party: Party of the candidate.
    :param votes: Number of votes the candidate received.
    '''
    __slots__ = ('id', 'name', 'party', 'votes')

    def __init__(self, id: str, name: str, party: str, votes: int = 0):
        self.id = id
        self.name = name
        self.party = party
        self.votes = votes

    def _key(self) -> Tuple[str, str, str, int]:
        return (self.id, self.name, self.party, self.votes)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, CandidateResult):
            return self._key() == other._key()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._key())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'party': self.party,
            'votes': self.votes,
        }

    def __repr__(self) -> str:
        return f'<CandidateResult({self.id},{self.votes})>'


Comparator = Callable[[CandidateResult, CandidateResult], Number]


class ElectionSession:
    '''A single election with a fixed list of candidates.

    :param candidates: Candidates standing in the election, as
        :class:`Candidate` objects or records with ``id``, ``name`` and
        ``party`` fields. Their order decides ties in :meth:`get_winner`.
        Anything that is not a sequence gives an election with no candidates.
    :param min_age: Minimum age of voters allowed to register.
    :raises ValueError: If the minimum age is not a finite number.
    '''
    def __init__(self,
                 candidates: Any,
                 min_age: Number = VOTING_AGE,
                 ):
        self._candidates: Tuple[Candidate, ...] = tuple(
            as_candidate_list(candidates)
        )
        self._candidate_map: Dict[str, Candidate] = {}
        for cand in self._candidates:
            if cand.id in self._candidate_map:
                logging.warning("duplicate candidate id %s", cand.id)
            else:
                self._candidate_map[cand.id] = cand
        if not is_finite_number(min_age):
            raise ValueError(f'invalid minimum voter age: {min_age!r}')
        self.min_age = min_age
        self._tally: Dict[str, int] = {}
        self._registered = set()
        self._voted = set()
        self._lock = threading.Lock()

    @property
    def candidates(self) -> Tuple[Candidate, ...]:
        return self._candidates

    @property
    def tally(self) -> Dict[str, int]:
        '''A copy of the current vote tally.'''
        return dict(self._tally)

    @property
    def registered_voters(self) -> FrozenSet[str]:
        return frozenset(self._registered)

    @property
    def voted_voters(self) -> FrozenSet[str]:
        return frozenset(self._voted)

    def is_registered(self, voter_id: Any) -> bool:
        return is_hashable(voter_id) and voter_id in self._registered

    def has_voted(self, voter_id: Any) -> bool:
        return is_hashable(voter_id) and voter_id in self._voted

    def register_voter(self, voter: Any) -> bool:
        '''Register a voter for the election.

        :param voter: A voter record (such as a :class:`Voter` or a
            dictionary) with a string ``id`` and a numeric ``age``.
        :returns: True if the voter was registered; False if the voter is
            malformed, under age or already registered.
        '''
        if not is_record(voter):
            logging.debug("refusing to register %r: not a voter", voter)
            return False
        voter_id = get_field(voter, 'id')
        age = get_field(voter, 'age')
        if not isinstance(voter_id, str):
            logging.debug("refusing to register %r: invalid id", voter)
            return False
        if not is_finite_number(age) or age < self.min_age:
            logging.debug("refusing to register %s: age %r", voter_id, age)
            return False
        with self._lock:
            if voter_id in self._registered:
                logging.debug("%s is already registered", voter_id)
                return False
            self._registered.add(voter_id)
        logging.info("registered voter %s", voter_id)
        return True

    def cast_vote(self,
                  voter_id: Any,
                  candidate_id: Any,
                  on_success: Optional[Callable[[Dict[str, str]], Any]] = None,
                  on_error: Optional[Callable[[str], Any]] = None,
                  ) -> Any:
        '''Cast a vote of a registered voter for a candidate.

        The voter must be registered, the candidate must stand in the
        election and the voter must not have voted yet, checked in this
        order. The first failed check rejects the vote.

        Without callbacks, the outcome is returned as a :class:`VoteAccepted`
        or :class:`VoteRejected` object. If any callback is given, the
        outcome is dispatched to it instead (see :meth:`VoteAccepted.dispatch`)
        and its return value is returned; None is returned if the outcome
        has no matching callback.

        :param voter_id: Identifier of a registered voter.
        :param candidate_id: Identifier of the candidate voted for.
        :param on_success: Called with a ``{'voter_id', 'candidate_id'}``
            dictionary if the vote is recorded.
        :param on_error: Called with the reason code if the vote is rejected.
        '''
        result = self._record_vote(voter_id, candidate_id)
        if on_success is None and on_error is None:
            return result
        return result.dispatch(on_success, on_error)

    def _record_vote(self, voter_id: Any, candidate_id: Any) -> CastResult:
        with self._lock:
            if not self.is_registered(voter_id):
                reason = VOTER_NOT_REGISTERED
            elif (not is_hashable(candidate_id)
                    or candidate_id not in self._candidate_map):
                reason = CANDIDATE_NOT_FOUND
            elif voter_id in self._voted:
                reason = ALREADY_VOTED
            else:
                self._tally = tallylib.tally.tally_pure(
                    self._tally, candidate_id
                )
                self._voted.add(voter_id)
                reason = None
        if reason is None:
            logging.info("%s voted for %s", voter_id, candidate_id)
            return VoteAccepted(voter_id, candidate_id)
        else:
            logging.info("rejected vote of %s for %s: %s",
                         voter_id, candidate_id, reason)
            return VoteRejected(reason)

    def get_results(self,
                    comparator: Optional[Comparator] = None,
                    ) -> List[CandidateResult]:
        '''Return the vote counts of all candidates.

        Every candidate is listed, including those with no votes.

        :param comparator: A function of two results returning a negative
            number, zero or a positive number if the first should go before,
            alongside or after the second. If not given, results are ordered
            by descending votes, candidates with equal votes keeping their
            original order.
        :returns: A new list of results on every call.
        '''
        results = [
            CandidateResult(
                cand.id, cand.name, cand.party, self._tally.get(cand.id, 0)
            )
            for cand in self._candidates
        ]
        if comparator is not None:
            return sorted(results, key=functools.cmp_to_key(comparator))
        else:
            return sorted(results, key=lambda res: res.votes, reverse=True)

    def get_winner(self) -> Optional[Candidate]:
        '''Return the candidate with the most votes.

        Ties are resolved in favor of the candidate listed first in the
        election's candidate list.

        :returns: The winning candidate, or None if nobody received a vote.
        '''
        max_votes = 0
        winner = None
        for cand in self._candidates:
            n_votes = self._tally.get(cand.id, 0)
            if n_votes > max_votes:
                max_votes = n_votes
                winner = cand
        return winner

    def total_votes(self) -> int:
        '''Return the number of votes cast so far.'''
        return tallylib.tally.total_votes(self._tally)

    def turnout(self) -> Fraction:
        '''Return the share of registered voters who have voted.'''
        if not self._registered:
            return Fraction(0)
        return Fraction(len(self._voted), len(self._registered))

    def __repr__(self) -> str:
        return (
            f'<ElectionSession({len(self._candidates)} candidates,'
            f'{len(self._registered)} registered,{len(self._voted)} voted)>'
        )


def create_election(candidates: Any, **kwargs) -> ElectionSession:
    '''Create an election session; see :class:`ElectionSession`.'''
    return ElectionSession(candidates, **kwargs)
