import sys
import os
import threading
import collections
from fractions import Fraction

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import tallylib.session
from tallylib.candidate import Candidate, Voter
from tallylib.session import ElectionSession, VoteAccepted, VoteRejected


CANDIDATES = [
    {'id': 'C1', 'name': 'Sarpanch Ram', 'party': 'Janata'},
    {'id': 'C2', 'name': 'Pradhan Sita', 'party': 'Lok'},
    {'id': 'C3', 'name': 'Mukhiya Gopal', 'party': 'Kisan'},
]


def election_with_voters(n_voters, candidates=CANDIDATES):
    election = tallylib.session.create_election(candidates)
    for i in range(n_voters):
        assert election.register_voter({'id': f'V{i}', 'name': '', 'age': 30})
    return election


def test_register_voter():
    election = ElectionSession(CANDIDATES)
    assert election.register_voter({'id': 'V1', 'name': 'Mohan', 'age': 25})
    assert not election.register_voter({'id': 'V1', 'name': 'Mohan', 'age': 25})
    assert election.registered_voters == frozenset(['V1'])


def test_register_voter_object():
    election = ElectionSession(CANDIDATES)
    assert election.register_voter(Voter('V1', 'Mohan', 18))
    assert election.is_registered('V1')


@pytest.mark.parametrize('voter', [
    {'id': 'V1', 'name': 'Chotu', 'age': 17},
    {'id': 'V1', 'age': 0},
    {'id': 'V1', 'age': -40},
    Voter('V1', 'Chotu', 17.5),
])
def test_register_underage(voter):
    election = ElectionSession(CANDIDATES)
    assert not election.register_voter(voter)
    assert not election.registered_voters


@pytest.mark.parametrize('voter', [
    None,
    'V1',
    42,
    ['V1', 25],
    {},
    {'id': 1, 'age': 25},
    {'id': 'V1'},
    {'id': 'V1', 'age': '25'},
    {'id': 'V1', 'age': True},
    {'id': 'V1', 'age': float('inf')},
    {'id': 'V1', 'age': float('nan')},
    Voter('V1', 'Nobody'),
])
def test_register_malformed(voter):
    election = ElectionSession(CANDIDATES)
    assert election.register_voter(voter) is False
    assert not election.registered_voters


def test_register_custom_age():
    election = ElectionSession(CANDIDATES, min_age=21)
    assert not election.register_voter({'id': 'V1', 'age': 20})
    assert election.register_voter({'id': 'V1', 'age': 21})


def test_cast_vote():
    election = election_with_voters(1)
    result = election.cast_vote('V0', 'C2')
    assert result
    assert result == VoteAccepted('V0', 'C2')
    assert election.has_voted('V0')
    assert election.tally == {'C2': 1}


@pytest.mark.parametrize(('voter_id', 'candidate_id', 'reason'), [
    ('V9', 'C1', 'voter_not_registered'),
    ('V9', 'C9', 'voter_not_registered'),
    (None, 'C1', 'voter_not_registered'),
    ('V1', 'C9', 'candidate_not_found'),
    ('V0', 'C9', 'candidate_not_found'),
    ('V0', 'C1', 'already_voted'),
    ('V0', 'C2', 'already_voted'),
])
def test_cast_vote_rejected(voter_id, candidate_id, reason):
    election = election_with_voters(2)
    assert election.cast_vote('V0', 'C1')
    result = election.cast_vote(voter_id, candidate_id)
    assert not result
    assert result == VoteRejected(reason)
    assert election.tally == {'C1': 1}
    assert election.voted_voters == frozenset(['V0'])


def test_cast_vote_callbacks():
    election = election_with_voters(1)
    on_success = lambda rec: ('ok', rec)
    on_error = lambda reason: ('error', reason)
    assert election.cast_vote('V0', 'C1', on_success, on_error) == (
        'ok', {'voter_id': 'V0', 'candidate_id': 'C1'}
    )
    assert election.cast_vote('V0', 'C1', on_success, on_error) == (
        'error', 'already_voted'
    )


def test_cast_vote_missing_callback():
    election = election_with_voters(2)
    errors = []
    assert election.cast_vote('V0', 'C1', on_error=errors.append) is None
    assert election.cast_vote('V0', 'C1', on_success=print) is None
    assert election.cast_vote('V1', 'C1', on_error=errors.append) is None
    assert errors == []
    assert election.tally == {'C1': 2}


def test_dispatch():
    assert VoteAccepted('V1', 'C1').dispatch(lambda rec: rec['voter_id']) == 'V1'
    assert VoteAccepted('V1', 'C1').dispatch(on_error=lambda r: r) is None
    assert VoteRejected('already_voted').dispatch(on_error=str.upper) == 'ALREADY_VOTED'
    assert VoteRejected('already_voted').dispatch(lambda rec: rec) is None


def test_results_unvoted():
    election = ElectionSession(CANDIDATES)
    results = election.get_results()
    assert [res.id for res in results] == ['C1', 'C2', 'C3']
    assert all(res.votes == 0 for res in results)


def test_results_default_order():
    election = election_with_voters(6)
    for voter_i, cand in enumerate(['C3', 'C2', 'C3', 'C2', 'C3', 'C1']):
        assert election.cast_vote(f'V{voter_i}', cand)
    results = election.get_results()
    assert [(res.id, res.votes) for res in results] == [
        ('C3', 3), ('C2', 2), ('C1', 1)
    ]
    assert results[0].to_dict() == {
        'id': 'C3', 'name': 'Mukhiya Gopal', 'party': 'Kisan', 'votes': 3
    }


def test_results_ties_keep_candidate_order():
    election = election_with_voters(2)
    assert election.cast_vote('V0', 'C3')
    assert election.cast_vote('V1', 'C2')
    assert [res.id for res in election.get_results()] == ['C2', 'C3', 'C1']


def test_results_comparator():
    election = election_with_voters(3)
    for voter_i, cand in enumerate(['C1', 'C1', 'C2']):
        assert election.cast_vote(f'V{voter_i}', cand)
    ascending = election.get_results(lambda a, b: a.votes - b.votes)
    assert [(res.id, res.votes) for res in ascending] == [
        ('C3', 0), ('C2', 1), ('C1', 2)
    ]
    by_name = election.get_results(
        lambda a, b: (a.name > b.name) - (a.name < b.name)
    )
    assert [res.name for res in by_name] == [
        'Mukhiya Gopal', 'Pradhan Sita', 'Sarpanch Ram'
    ]


def test_results_fresh_copies():
    election = election_with_voters(1)
    assert election.cast_vote('V0', 'C1')
    results = election.get_results()
    results[0].votes = 100
    results.clear()
    assert election.get_results()[0].votes == 1
    assert election.tally == {'C1': 1}
    assert election.get_results() is not election.get_results()


@pytest.mark.parametrize('ballots', [
    [],
    ['C1'],
    ['C2', 'C2', 'C1'],
    ['C3', 'C1', 'C2', 'C3', 'C9', 'C1', 'C3'],
])
def test_results_consistent(ballots):
    election = election_with_voters(len(ballots))
    n_accepted = sum(
        bool(election.cast_vote(f'V{i}', cand))
        for i, cand in enumerate(ballots)
    )
    results = election.get_results()
    votes = [res.votes for res in results]
    assert votes == sorted(votes, reverse=True)
    assert sum(votes) == n_accepted == election.total_votes()
    assert len(results) == len(CANDIDATES)


def test_winner_none():
    election = election_with_voters(3)
    assert election.get_winner() is None
    assert ElectionSession([]).get_winner() is None


def test_winner_tie_first_listed():
    election = election_with_voters(6)
    for voter_i, cand in enumerate(['C2', 'C2', 'C2', 'C1', 'C1', 'C1']):
        assert election.cast_vote(f'V{voter_i}', cand)
    assert election.get_winner() == Candidate('C1', 'Sarpanch Ram', 'Janata')


def test_winner():
    election = election_with_voters(3)
    for voter_i, cand in enumerate(['C3', 'C2', 'C3']):
        assert election.cast_vote(f'V{voter_i}', cand)
    assert election.get_winner().id == 'C3'


def test_end_to_end():
    election = tallylib.session.create_election([
        {'id': 'C1', 'name': 'Sarpanch Ram', 'party': 'Janata'},
        {'id': 'C2', 'name': 'Pradhan Sita', 'party': 'Lok'},
    ])
    assert election.register_voter({'id': 'V1', 'name': 'Mohan', 'age': 25})
    assert election.cast_vote(
        'V1', 'C1', lambda rec: 'voted!', lambda err: 'error: ' + err
    ) == 'voted!'
    assert [(res.id, res.votes) for res in election.get_results()] == [
        ('C1', 1), ('C2', 0)
    ]
    assert election.get_winner().name == 'Sarpanch Ram'


@pytest.mark.parametrize('candidates', [None, 'C1', 42, {'id': 'C1'}])
def test_malformed_candidate_list(candidates):
    election = ElectionSession(candidates)
    assert election.candidates == ()
    assert election.get_results() == []
    assert election.register_voter({'id': 'V1', 'age': 30})
    assert election.cast_vote('V1', 'C1') == VoteRejected('candidate_not_found')


def test_candidate_list_copied():
    candidates = list(CANDIDATES)
    election = ElectionSession(candidates)
    candidates.append({'id': 'C4', 'name': 'Late', 'party': ''})
    assert len(election.get_results()) == 3


def test_turnout():
    election = election_with_voters(4)
    assert election.turnout() == 0
    assert election.cast_vote('V0', 'C1')
    assert election.turnout() == Fraction(1, 4)
    assert ElectionSession(CANDIDATES).turnout() == 0


def test_concurrent_votes_counted_once():
    election = election_with_voters(1)
    results = []

    def vote():
        results.append(election.cast_vote('V0', 'C1'))

    threads = [threading.Thread(target=vote) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert sum(bool(res) for res in results) == 1
    assert election.tally == {'C1': 1}


@pytest.mark.parametrize(('voter_id', 'candidate_id', 'reason'), [
    (['V0'], 'C1', 'voter_not_registered'),
    ({'id': 'V0'}, 'C1', 'voter_not_registered'),
    ('V0', {'id': 'C1'}, 'candidate_not_found'),
    ('V0', ['C1'], 'candidate_not_found'),
])
def test_cast_vote_unhashable_ids(voter_id, candidate_id, reason):
    election = election_with_voters(1)
    assert election.cast_vote(voter_id, candidate_id) == VoteRejected(reason)
    assert election.cast_vote(
        voter_id, candidate_id, on_error=lambda err: err
    ) == reason
    assert election.tally == {}
    assert not election.voted_voters


def test_unhashable_id_lookups():
    election = election_with_voters(1)
    assert not election.is_registered(['V0'])
    assert not election.has_voted({'id': 'V0'})


@pytest.mark.parametrize('min_age', [None, '18', float('nan'), float('inf'), True])
def test_invalid_min_age(min_age):
    with pytest.raises(ValueError):
        ElectionSession(CANDIDATES, min_age=min_age)


def test_register_namedtuple_voter():
    VoterRow = collections.namedtuple('VoterRow', ['id', 'name', 'age'])
    election = ElectionSession(CANDIDATES)
    assert election.register_voter(VoterRow('V1', 'Mohan', 25))
    assert not election.register_voter(VoterRow('V2', 'Chotu', 12))
    assert election.registered_voters == frozenset(['V1'])
