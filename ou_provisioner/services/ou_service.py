"""
Existence checks, recursive creation and deletion of organizational units.

Every decision is taken from a fresh search against the directory; nothing is
cached between calls.
"""
import logging

from ldap3.utils.conv import escape_filter_chars

from ou_provisioner.core.exceptions import (
    AlreadyExists,
    Inconsistency,
    MissingParent,
    PolicyViolation,
)
from ou_provisioner.services.directory import DirectorySession
from ou_provisioner.services.dn import (
    is_ou_dn,
    is_within_base,
    leaf_attribute_value,
    parent_of,
    same_dn,
)

logger = logging.getLogger(__name__)

OU_OBJECT_CLASS = "organizationalUnit"


def ou_exists(session: DirectorySession, dn: str) -> bool:
    """
    True if exactly one organizational unit with this DN exists.

    Raises:
        Inconsistency: the search matched more than one entry.
        TransportError: the search itself failed.

    """
    search_filter = (
        f"(&(objectClass={OU_OBJECT_CLASS})"
        f"(distinguishedName={escape_filter_chars(dn)}))"
    )
    results = session.search(
        session.search_base, search_filter, ["distinguishedName"]
    )
    logger.debug(f"Existence check for {dn}: {len(results)} match(es)")
    if len(results) > 1:
        raise Inconsistency(f'too many results returned searching for DN "{dn}"')
    return len(results) == 1


def create_ou(session: DirectorySession, dn: str, create_parents: bool = False) -> None:
    """
    Create the organizational unit ``dn``.

    Missing ancestors between ``dn`` and the search base are created first
    when ``create_parents`` is set; every ancestor goes through the same
    containment and existence checks as the target. Ancestors created before
    a failure are left in place, so repeating the call resumes the walk.

    Raises:
        PolicyViolation: ``dn`` is outside the search base.
        AlreadyExists: ``dn`` is already present.
        MissingParent: the parent is absent and ``create_parents`` is false.
        InvalidDN: ``dn`` is not an ``OU=`` DN.
        TransportError: the directory refused a search or the add.

    """
    search_base = session.search_base
    if not is_within_base(dn, search_base):
        raise PolicyViolation(
            f'cannot create organizational unit "{dn}" outside search base "{search_base}"'
        )

    if ou_exists(session, dn):
        raise AlreadyExists(f'organizational unit "{dn}" already exists')

    parent = parent_of(dn)
    if parent and not same_dn(parent, search_base) and is_ou_dn(dn):
        if not ou_exists(session, parent):
            if not create_parents:
                raise MissingParent(
                    f'parent for organizational unit "{dn}" does not exist'
                )
            create_ou(session, parent, create_parents=True)

    name = leaf_attribute_value(dn)
    session.add(dn, [OU_OBJECT_CLASS], {"ou": name})
    logger.info(f"Created organizational unit {dn}")


def delete_ou(session: DirectorySession, dn: str) -> None:
    """Delete ``dn`` if it exists. Children are not touched."""
    if not ou_exists(session, dn):
        logger.debug(f"Organizational unit {dn} already absent")
        return
    session.delete(dn)
    logger.info(f"Deleted organizational unit {dn}")
