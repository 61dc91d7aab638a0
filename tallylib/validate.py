'''Standalone voter eligibility validators.

A :class:`VoteValidator` is built from a declarative rule set (a minimum age
and a list of fields that must be present) and can then be called on any
voter-like value. Unlike the election session, validators report *why* a
voter is ineligible, as a :class:`ValidationResult` with a reason code:

-   ``invalid_voter`` - the value is not a record at all,
-   ``missing_<field>`` - the first required field (in declaration order) that
    is absent; presence is checked by key, not by truthiness,
-   ``underage`` - the voter's age is not a finite number at least equal to
    the minimum age.

Validators never raise on malformed voters. They are not invoked by
:class:`tallylib.session.ElectionSession`; combine them with it explicitly
if richer rules than the session's built-in age check are needed.
'''

import collections.abc
from numbers import Real
from typing import Any, Dict, Optional, Sequence, Tuple

from tallylib.util import is_record, has_field, get_field, \
    get_aliased_field, is_finite_number


INVALID_VOTER = 'invalid_voter'
UNDERAGE = 'underage'
MISSING_PREFIX = 'missing_'


class ValidationResult:
    '''Outcome of a voter validation.

    Truthy if the voter is valid.

    :param valid: Whether the voter passed all the rules.
    :param reason: Reason code for invalid voters, None for valid ones.
    '''
    __slots__ = ('valid', 'reason')

    def __init__(self, valid: bool, reason: Optional[str] = None):
        self.valid = valid
        self.reason = reason

    def __bool__(self) -> bool:
        return self.valid

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, ValidationResult):
            return (self.valid, self.reason) == (other.valid, other.reason)
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.valid, self.reason))

    def to_dict(self) -> Dict[str, Any]:
        return {'valid': self.valid, 'reason': self.reason}

    def __repr__(self) -> str:
        return f'<ValidationResult({self.valid},{self.reason!r})>'


VALID = ValidationResult(True, None)


def missing_reason(field: str) -> str:
    return MISSING_PREFIX + str(field)


class VoteValidator:
    '''Validate a voter against a fixed set of eligibility rules.

    :param min_age: Minimum age of the voter. Ignored unless it is a finite
        number.
    :param required_fields: Names of fields the voter must have, checked in
        this order.
    '''
    def __init__(self,
                 min_age: Optional[Real] = None,
                 required_fields: Sequence[str] = (),
                 ):
        self.min_age = min_age
        if (not isinstance(required_fields, collections.abc.Sequence)
                or isinstance(required_fields, (str, bytes))):
            required_fields = ()
        self.required_fields: Tuple[str, ...] = tuple(required_fields)

    def validate(self, voter: Any) -> ValidationResult:
        '''Check the voter against the rules.

        :param voter: A voter-like record.
        :returns: The validation result; never raises.
        '''
        if not is_record(voter):
            return ValidationResult(False, INVALID_VOTER)
        for field in self.required_fields:
            if not has_field(voter, field):
                return ValidationResult(False, missing_reason(field))
        if is_finite_number(self.min_age):
            age = get_field(voter, 'age')
            if not is_finite_number(age) or age < self.min_age:
                return ValidationResult(False, UNDERAGE)
        return VALID

    __call__ = validate

    def __repr__(self) -> str:
        return (
            f'<VoteValidator(min_age={self.min_age!r},'
            f'required_fields={list(self.required_fields)!r})>'
        )


def create_vote_validator(rules: Any = None) -> VoteValidator:
    '''Build a validator from a JSON-like rule set.

    :param rules: A mapping with optional ``min_age`` and ``required_fields``
        keys (``minAge`` and ``requiredFields`` are accepted too). Anything
        else gives a validator that only rejects non-record voters.
    '''
    if not is_record(rules):
        return VoteValidator()
    return VoteValidator(
        min_age=get_aliased_field(rules, 'min_age', 'minAge'),
        required_fields=get_aliased_field(
            rules, 'required_fields', 'requiredFields', default=()
        ),
    )
