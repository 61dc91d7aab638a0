"""Tallylib - a library for running small in-memory elections.

Tallylib objects cover the life of a single election with a fixed list of
candidates, such as a village council (panchayat) election:

-   Who stands in the election. Candidates are defined by the
    :class:`Candidate` objects of the ``candidate`` module.
-   Who can vote. An :class:`ElectionSession` from the ``session`` module
    registers voters of voting age; richer eligibility rules can be checked
    beforehand with the validators of the ``validate`` module.
-   How votes are counted. The session records at most one vote per
    registered voter and reports ordered results and the winner. The
    ``tally`` module provides the immutable tally operations it is built on
    and the ``region`` module aggregates vote counts reported over nested
    regions.
"""

from tallylib.candidate import Candidate, Voter, CandidateError
from tallylib.session import ElectionSession, create_election, \
    VoteAccepted, VoteRejected, CandidateResult
from tallylib.validate import VoteValidator, ValidationResult, \
    create_vote_validator
from tallylib.region import Region, count_votes_in_regions
from tallylib.tally import tally_pure
