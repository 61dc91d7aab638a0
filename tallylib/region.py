'''Vote aggregation over nested regions.

Election results are often reported per region (a district made of blocks
made of villages, say), each region carrying the votes counted directly in it
plus any number of sub-regions. :func:`count_votes_in_regions` sums all of
them.

Region trees are usually supplied from outside, e.g. decoded from JSON, so
they are accepted as mappings with ``name``, ``votes`` and ``sub_regions``
(or ``subRegions``) keys as well as :class:`Region` objects.
'''

import logging
from numbers import Number
from typing import Any, Iterator, List, Sequence

from tallylib.util import is_record, get_field, get_aliased_field, \
    is_finite_number


SUB_REGION_FIELDS = ('sub_regions', 'subRegions')

_EXHAUSTED = object()


class Region:
    '''A named region with its own vote count and sub-regions.

    :param name: Name of the region.
    :param votes: Number of votes counted directly in the region (not in
        any of its sub-regions).
    :param sub_regions: Regions nested within this one.
    '''
    def __init__(self,
                 name: str,
                 votes: Number = 0,
                 sub_regions: Sequence['Region'] = (),
                 ):
        self.name = name
        self.votes = votes
        self.sub_regions = tuple(sub_regions)

    def total_votes(self) -> Number:
        '''Return the votes of this region and all its sub-regions.'''
        return count_votes_in_regions(self)

    def __repr__(self) -> str:
        return f'<Region({self.name},{self.votes},{len(self.sub_regions)})>'


def own_votes(region: Any) -> Number:
    votes = get_field(region, 'votes')
    return votes if is_finite_number(votes) else 0


def sub_regions(region: Any) -> List[Any]:
    subs = get_aliased_field(region, *SUB_REGION_FIELDS)
    if isinstance(subs, (list, tuple)):
        return list(subs)
    else:
        return []


def iter_regions(region_tree: Any) -> Iterator[Any]:
    '''Yield all regions of the tree in depth-first preorder.

    The tree is walked with an explicit stack, so depth is not limited by
    the interpreter's recursion limit. A region appearing among its own
    descendants is skipped; a region shared by two parents is yielded under
    each of them. Sub-region entries that are not records are skipped.
    '''
    if not is_record(region_tree):
        return
    yield region_tree
    on_path = {id(region_tree)}
    stack = [(region_tree, iter(sub_regions(region_tree)))]
    while stack:
        node, children = stack[-1]
        child = next(children, _EXHAUSTED)
        if child is _EXHAUSTED:
            stack.pop()
            on_path.discard(id(node))
        elif not is_record(child):
            continue
        elif id(child) in on_path:
            logging.warning(
                "region %r contains itself, ignoring the cycle",
                get_field(child, 'name')
            )
        else:
            yield child
            on_path.add(id(child))
            stack.append((child, iter(sub_regions(child))))


def count_votes_in_regions(region_tree: Any) -> Number:
    '''Count the total votes in a region tree.

    The total is the region's own votes plus the totals of all its
    sub-regions. Malformed nodes contribute nothing: a node that is not a
    record counts as 0, a non-numeric ``votes`` value counts as 0 and a
    missing or non-list ``sub_regions`` value counts as no sub-regions.
    See :func:`iter_regions` for the handling of cycles.

    :param region_tree: Root of the region tree.
    '''
    return sum(own_votes(region) for region in iter_regions(region_tree))
