from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, Path, status

from ou_provisioner.api.deps import get_directory_session
from ou_provisioner.core.exceptions import (
    AlreadyExists,
    DirectoryError,
    Inconsistency,
    InvalidDN,
    MissingParent,
    PolicyViolation,
    TransportError,
)
from ou_provisioner.core.security import get_current_user
from ou_provisioner.models.ou import OUCreate, OUResponse
from ou_provisioner.services.audit_service import AuditService, get_audit_service
from ou_provisioner.services.directory import DirectorySession
from ou_provisioner.services.dn import leaf_attribute_value
from ou_provisioner.services.ou_service import create_ou, delete_ou, ou_exists

router = APIRouter(prefix="/organizational-units", tags=["Organizational units"])

ERROR_STATUS = {
    InvalidDN: status.HTTP_400_BAD_REQUEST,
    PolicyViolation: status.HTTP_403_FORBIDDEN,
    AlreadyExists: status.HTTP_409_CONFLICT,
    MissingParent: status.HTTP_422_UNPROCESSABLE_ENTITY,
    Inconsistency: status.HTTP_500_INTERNAL_SERVER_ERROR,
    TransportError: status.HTTP_502_BAD_GATEWAY,
}


def to_http_error(error: DirectoryError) -> HTTPException:
    for error_type, status_code in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))


@router.post("", response_model=OUResponse, status_code=status.HTTP_201_CREATED)
def create_organizational_unit(
    ou: OUCreate,
    session: DirectorySession = Depends(get_directory_session),
    audit: AuditService = Depends(get_audit_service),
    current_user: Dict = Depends(get_current_user),
) -> OUResponse:
    """Create an Organizational Unit, optionally with its missing parents."""
    actor = current_user.get("username", "anonymous")
    details = {"create_parents": ou.create_parents}
    try:
        create_ou(session, ou.distinguished_name, ou.create_parents)
    except DirectoryError as e:
        audit.log(
            actor=actor,
            action="create_ou",
            resource_id=ou.distinguished_name,
            status="failure",
            message=str(e),
            details=details,
        )
        raise to_http_error(e) from e

    audit.log(
        actor=actor,
        action="create_ou",
        resource_id=ou.distinguished_name,
        details=details,
    )
    return OUResponse(
        distinguished_name=ou.distinguished_name,
        ou=leaf_attribute_value(ou.distinguished_name),
    )


@router.get("/{distinguished_name:path}", response_model=OUResponse)
def read_organizational_unit(
    distinguished_name: str = Path(..., description="Distinguished Name"),
    session: DirectorySession = Depends(get_directory_session),
) -> OUResponse:
    """Get an Organizational Unit by DN; 404 if it no longer exists."""
    try:
        exists = ou_exists(session, distinguished_name)
        if not exists:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f'unable to import non-existent organizational unit "{distinguished_name}"',
            )
        return OUResponse(
            distinguished_name=distinguished_name,
            ou=leaf_attribute_value(distinguished_name),
        )
    except DirectoryError as e:
        raise to_http_error(e) from e


@router.delete("/{distinguished_name:path}", status_code=status.HTTP_204_NO_CONTENT)
def delete_organizational_unit(
    distinguished_name: str = Path(..., description="Distinguished Name"),
    session: DirectorySession = Depends(get_directory_session),
    audit: AuditService = Depends(get_audit_service),
    current_user: Dict = Depends(get_current_user),
):
    """Delete an Organizational Unit (children are not removed)."""
    actor = current_user.get("username", "anonymous")
    try:
        delete_ou(session, distinguished_name)
    except DirectoryError as e:
        audit.log(
            actor=actor,
            action="delete_ou",
            resource_id=distinguished_name,
            status="failure",
            message=str(e),
        )
        raise to_http_error(e) from e

    audit.log(actor=actor, action="delete_ou", resource_id=distinguished_name)
    return None
