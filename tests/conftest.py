import re
from typing import Any, Optional

import pytest

from ou_provisioner.core.exceptions import TransportError

SEARCH_BASE = "DC=corp,DC=com"

_DN_FILTER = re.compile(r"\(distinguishedName=((?:\\[0-9a-fA-F]{2}|[^)])*)\)")


def _unescape_filter(value: str) -> str:
    return re.sub(r"\\([0-9a-fA-F]{2})", lambda m: chr(int(m.group(1), 16)), value)


class FakeDirectory:
    """In-memory stand-in for DirectorySession holding a flat set of OU DNs."""

    def __init__(self, search_base: str = SEARCH_BASE, entries: Optional[list[str]] = None):
        self.search_base = search_base
        self.entries: list[str] = list(entries or [])
        self.searches: list[tuple[str, str, list[str]]] = []
        self.adds: list[tuple[str, list[str], dict[str, Any]]] = []
        self.deletes: list[str] = []
        self.fail_add_for: set[str] = set()
        self.fail_delete_for: set[str] = set()
        self.closed = False

    def search(self, search_base, search_filter, attributes=None):
        self.searches.append((search_base, search_filter, attributes))
        match = _DN_FILTER.search(search_filter)
        wanted = _unescape_filter(match.group(1))
        return [
            {"dn": dn, "attributes": {"distinguishedName": [dn]}}
            for dn in self.entries
            if dn == wanted
        ]

    def add(self, dn, object_class, attributes):
        if dn in self.fail_add_for:
            raise TransportError(f"LDAP add failed for {dn}: insufficientAccessRights")
        self.adds.append((dn, object_class, attributes))
        self.entries.append(dn)

    def delete(self, dn):
        if dn in self.fail_delete_for:
            raise TransportError(f"LDAP delete failed for {dn}: notAllowedOnNonLeaf")
        self.deletes.append(dn)
        self.entries.remove(dn)

    def close(self):
        self.closed = True

    @property
    def added_dns(self) -> list[str]:
        return [dn for dn, _, _ in self.adds]


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory()
