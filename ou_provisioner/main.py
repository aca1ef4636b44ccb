from fastapi import FastAPI, Depends

from ou_provisioner.api.v1.auth import router as auth_router
from ou_provisioner.api.v1.ous import router as ous_router
from ou_provisioner.core.config import settings
from ou_provisioner.core.logging import setup_logging
from ou_provisioner.core.security import get_current_user


def get_app() -> FastAPI:
    setup_logging(settings.debug)

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        description="Create and delete LDAP organizational units below a search base",
    )

    @app.get("/health", tags=["System"])
    def health() -> dict:
        return {"status": "ok", "service": settings.app_name}

    app.include_router(auth_router)
    app.include_router(ous_router, dependencies=[Depends(get_current_user)])

    return app


app = get_app()
