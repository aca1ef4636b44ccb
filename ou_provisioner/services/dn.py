"""
Distinguished name path arithmetic.

DNs are handled as plain strings: ``OU=Child,OU=Parent,DC=corp,DC=com``, most
specific component first. A comma preceded by a backslash is part of a value,
not a separator. Leading spaces after a separator are dropped; nothing else is
normalized, so ``ou=a`` and ``OU=a`` are different DNs.
"""
import re

from ou_provisioner.core.exceptions import InvalidDN

# One RDN component: escaped characters or anything but a comma/backslash
_COMPONENT = re.compile(r"(?:\\.|[^,\\])+", re.DOTALL)
_OU_LEAF = re.compile(r"^OU=((?:\\.|[^,\\])+)", re.IGNORECASE | re.DOTALL)
# A run of hex pairs is one UTF-8 sequence; anything else is a single character
_ESCAPE = re.compile(r"((?:\\[0-9A-Fa-f]{2})+)|\\(.)", re.DOTALL)
_TRAILING_BACKSLASHES = re.compile(r"\\+$")


def _check_escapes(dn: str) -> None:
    trailing = _TRAILING_BACKSLASHES.search(dn)
    if trailing and len(trailing.group(0)) % 2:
        raise InvalidDN(f'"{dn}" ends with an incomplete escape')


def split_dn(dn: str) -> list[str]:
    """Split ``dn`` into its RDN components, leading spaces removed."""
    _check_escapes(dn)
    return [component.lstrip(" ") for component in _COMPONENT.findall(dn)]


def same_dn(first: str, second: str) -> bool:
    """Component-wise literal comparison of two DNs."""
    return split_dn(first) == split_dn(second)


def parent_of(dn: str) -> str:
    """
    Return the DN of the immediate parent of ``dn``.

    The first component is dropped and the rest are re-joined with ``,``.
    A DN with a single component has no parent and yields ``""``.

    Raises:
        InvalidDN: ``dn`` is empty.

    """
    if not dn:
        raise InvalidDN("unable to get parent object of empty string")
    components = split_dn(dn)
    if len(components) < 2:
        return ""
    return ",".join(components[1:])


def is_ou_dn(dn: str) -> bool:
    """True if the leaf component of ``dn`` is an ``OU=`` component."""
    return _OU_LEAF.match(dn) is not None


def _unescape(value: str) -> str:
    def replace(match: re.Match) -> str:
        hex_run, char = match.groups()
        if char is not None:
            return char
        try:
            return bytes.fromhex(hex_run.replace("\\", "")).decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidDN(f'"{value}" contains an invalid UTF-8 escape') from e

    return _ESCAPE.sub(replace, value)


def leaf_attribute_value(dn: str) -> str:
    """
    Return the value of the leading ``OU=`` component of ``dn``.

    ``OU=Sales\\, EMEA,DC=corp,DC=com`` gives ``Sales, EMEA`` and
    ``OU=Caf\\C3\\A9,DC=corp,DC=com`` gives ``Café``.

    Raises:
        InvalidDN: the leaf of ``dn`` is not an ``OU=`` component or its
            escapes are malformed.

    """
    _check_escapes(dn)
    match = _OU_LEAF.match(dn)
    if match is None:
        raise InvalidDN(f'"{dn}" is not an organizational unit DN')
    return _unescape(match.group(1))


def is_within_base(dn: str, base: str) -> bool:
    """
    True if ``dn`` is ``base`` itself or lies somewhere beneath it.

    The comparison is aligned on component boundaries, so
    ``OU=X,DC=notcorp,DC=com`` is not within ``DC=corp,DC=com``.
    """
    dn_components = split_dn(dn)
    base_components = split_dn(base)
    if not base_components or len(dn_components) < len(base_components):
        return False
    return dn_components[len(dn_components) - len(base_components):] == base_components
