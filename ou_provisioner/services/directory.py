from typing import Any, Optional
import logging

from ldap3 import Server, Connection, ALL
from ldap3.core.exceptions import LDAPException
from ldap3.core.results import RESULT_SUCCESS, RESULT_NO_SUCH_OBJECT

from ou_provisioner.core.exceptions import TransportError

logger = logging.getLogger(__name__)


def detect_search_base(server: Server) -> str:
    """Read the default naming context advertised by the root DSE."""
    info = server.info
    contexts = info.other.get("defaultNamingContext") if info else None
    if not contexts:
        raise TransportError(
            "LDAP search base not configured and the server does not "
            "advertise a defaultNamingContext"
        )
    return contexts[0]


class DirectorySession:
    """
    A bound directory connection together with the authorized search base.

    The search base is fixed for the lifetime of the session. Callers sharing
    a session must serialize their calls; nothing here is thread-safe.
    """

    def __init__(self, connection: Connection, search_base: str):
        self.connection = connection
        self.search_base = search_base

    @classmethod
    def connect(cls, settings: Any) -> "DirectorySession":
        """Open and bind a connection using the LDAP_* settings."""
        if not settings.ldap_server:
            raise TransportError(
                "LDAP service not configured. Please set LDAP_* environment variables."
            )

        server = Server(
            settings.ldap_server,
            port=settings.ldap_port,
            use_ssl=settings.ldap_use_ssl,
            get_info=ALL,
            connect_timeout=settings.ldap_connect_timeout,
        )
        try:
            conn = Connection(
                server,
                user=settings.ldap_bind_dn,
                password=settings.ldap_bind_password,
                auto_bind=True,
                receive_timeout=settings.ldap_receive_timeout,
            )
        except LDAPException as e:
            logger.error(f"LDAP connect/bind error: {e}")
            raise TransportError(f"Unable to bind to {settings.ldap_server}: {e}") from e

        search_base = settings.ldap_search_base
        if not search_base:
            try:
                search_base = detect_search_base(server)
            except TransportError:
                conn.unbind()
                raise
            logger.info(f"Detected LDAP search base {search_base}")
        return cls(conn, search_base)

    def close(self) -> None:
        try:
            self.connection.unbind()
        except LDAPException as e:
            logger.warning(f"LDAP unbind error: {e}")

    def __enter__(self) -> "DirectorySession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _failure(self, operation: str, dn: str) -> TransportError:
        result = self.connection.result or {}
        description = result.get("description") or result.get("message") or "unknown error"
        logger.error(f"Failed to {operation} {dn}: {self.connection.result}")
        return TransportError(f"LDAP {operation} failed for {dn}: {description}")

    def search(
        self,
        search_base: str,
        search_filter: str,
        attributes: Optional[list[str]] = None,
    ) -> list[dict[str, Any]]:
        """Search for entries in LDAP."""
        if attributes is None:
            attributes = ["*"]

        try:
            self.connection.search(
                search_base=search_base,
                search_filter=search_filter,
                attributes=attributes,
            )
        except LDAPException as e:
            logger.error(f"LDAP search error: {e}")
            raise TransportError(f"LDAP search failed: {e}") from e

        code = (self.connection.result or {}).get("result", RESULT_SUCCESS)
        if code == RESULT_NO_SUCH_OBJECT:
            return []
        if code != RESULT_SUCCESS:
            raise self._failure("search", search_base)

        results = []
        for entry in self.connection.entries:
            results.append(
                {
                    "dn": entry.entry_dn,
                    "attributes": entry.entry_attributes_as_dict,
                }
            )
        return results

    def add(self, dn: str, object_class: list[str], attributes: dict[str, Any]) -> None:
        """Add a new entry to LDAP."""
        try:
            success = self.connection.add(dn, object_class, attributes)
        except LDAPException as e:
            logger.error(f"LDAP add error: {e}")
            raise TransportError(f"LDAP add failed for {dn}: {e}") from e
        if not success:
            raise self._failure("add", dn)

    def delete(self, dn: str) -> None:
        """Delete an LDAP entry."""
        try:
            success = self.connection.delete(dn)
        except LDAPException as e:
            logger.error(f"LDAP delete error: {e}")
            raise TransportError(f"LDAP delete failed for {dn}: {e}") from e
        if not success:
            raise self._failure("delete", dn)
