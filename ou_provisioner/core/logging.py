import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(debug: bool = False) -> None:
    """Configure the root logger for the service."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("ou_provisioner").setLevel(level)
    # ldap3 is chatty at DEBUG
    logging.getLogger("ldap3").setLevel(logging.WARNING)
