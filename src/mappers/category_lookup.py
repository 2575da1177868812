"""
Tag-keyed lookups over wire entity arrays.

The benefits system distinguishes array items by a category tag instead of
by field name. Every such lookup goes through these two helpers so that a
missing optional item and a missing required item stay distinguishable.
"""

from typing import Callable, Iterable, Optional, TypeVar

from domain.errors import MalformedUpstreamData

T = TypeVar("T")

TagOf = Callable[[T], Optional[str]]


def find_by_category(items: Optional[Iterable[T]], tag: str, key: TagOf) -> Optional[T]:
    """First item whose tag equals tag, or None. Untagged items never match."""
    for item in items or ():
        if key(item) == tag:
            return item
    return None


def require_by_category(items: Optional[Iterable[T]], tag: str, key: TagOf, path: str) -> T:
    """
    Like find_by_category, for items the upstream contract guarantees.

    Raises:
        MalformedUpstreamData: no item carries the tag
    """
    item = find_by_category(items, tag, key)
    if item is None:
        raise MalformedUpstreamData(path, tag)
    return item


# Tag accessors for the entity arrays

def address_category(address) -> Optional[str]:
    code = address.AddressCategoryCode
    return code.ReferenceDataName if code is not None else None


def telephone_category(telephone) -> Optional[str]:
    return telephone.TelephoneNumberCategoryCode.ReferenceDataName


def identification_category(identification) -> Optional[str]:
    return identification.IdentificationCategoryText


def flag_category(flag) -> Optional[str]:
    return flag.FlagCategoryText


def relationship_category(person) -> Optional[str]:
    return person.PersonRelationshipCode.ReferenceDataName
