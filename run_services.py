import asyncio
import uvicorn

from shared.core.config import settings


def service_config(app_path: str, port: int) -> uvicorn.Config:
    return uvicorn.Config(
        app_path,
        host=settings.SERVICE_HOST,
        port=port,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower(),
    )


async def start_servers():
    # Identity: users, approvals, Clerk webhook, portal routing
    identity = uvicorn.Server(service_config(
        "identity_service.app.main:app", settings.IDENTITY_SERVICE_PORT))

    # Portal: partners, purchase requests, CRM, prices, Tipalti, webhooks
    portal = uvicorn.Server(service_config(
        "portal_service.app.main:app", settings.PORTAL_SERVICE_PORT))

    await asyncio.gather(
        identity.serve(),
        portal.serve(),
    )

if __name__ == "__main__":
    try:
        asyncio.run(start_servers())
    except KeyboardInterrupt:
        print("\nShutting down servers...")
