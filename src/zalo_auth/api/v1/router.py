from fastapi import APIRouter

from zalo_auth.api.v1.public import oauth

api_router = APIRouter()

# Social login (Zalo)
api_router.include_router(oauth.router, prefix="/auth/oauth", tags=["oauth"])


@api_router.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "healthy"}
