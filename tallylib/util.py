'''Various utility functions for other modules of Tallylib.

Most of these deal with *records* - the voter-like, candidate-like and
region-like values that callers pass in. A record is either a mapping
(such as a dictionary decoded from JSON) or a plain object with attributes;
fields are looked up by key in the former and by attribute in the latter.

There should normally be no need to use these functions directly.
'''

import math
import operator
import collections.abc
from numbers import Integral, Number, Real
from typing import Any, Dict


NON_RECORD_TYPES = (
    str, bytes, bytearray, Number,
    collections.abc.Sequence, collections.abc.Set,
)


def is_record(value: Any) -> bool:
    '''Return True if the value can carry named fields.

    Mappings, named tuples and plain objects qualify; None, strings, numbers
    and other collections do not.
    '''
    if value is None:
        return False
    elif isinstance(value, collections.abc.Mapping):
        return True
    elif isinstance(value, tuple) and hasattr(value, '_fields'):
        return True
    else:
        return not isinstance(value, NON_RECORD_TYPES)


def is_hashable(value: Any) -> bool:
    '''Return True if the value can be used as a dictionary key.'''
    try:
        hash(value)
    except TypeError:
        return False
    return True


def has_field(record: Any, name: Any) -> bool:
    '''Return True if the record has the field, regardless of its value.

    Attribute records can only have string field names.
    '''
    if isinstance(record, collections.abc.Mapping):
        return is_hashable(name) and name in record
    elif not isinstance(name, str):
        return False
    else:
        return hasattr(record, name)


def get_field(record: Any, name: str, default: Any = None) -> Any:
    if isinstance(record, collections.abc.Mapping):
        return record.get(name, default)
    else:
        return getattr(record, name, default)


def get_aliased_field(record: Any, *names: str, default: Any = None) -> Any:
    '''Return the value of the first field present among the given names.'''
    for name in names:
        if has_field(record, name):
            return get_field(record, name)
    return default


def is_finite_number(value: Any) -> bool:
    '''Return True for real, finite numbers. Booleans are not numbers here.'''
    if not isinstance(value, Real) or isinstance(value, bool):
        return False
    # ints of any size are finite but may not fit into a float
    return isinstance(value, Integral) or math.isfinite(value)


def sum_dicts(dict1: Dict[Any, Number],
              dict2: Dict[Any, Number],
              ) -> Dict[Any, Number]:
    summed = dict1.copy()
    for key, addition in dict2.items():
        summed[key] = summed.get(key, 0) + addition
    return summed


def descending_dict(d: Dict[Any, Number]) -> Dict[Any, Number]:
    return dict(sorted(d.items(), key=operator.itemgetter(1), reverse=True))
