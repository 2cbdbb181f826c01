from fastapi import APIRouter

router = APIRouter()
legacy_router = APIRouter()


@router.get("/health", summary="Health Check", description="Check the health status of the application.")
async def health_check():
    return {"status": "healthy"}


@legacy_router.get("/api/server", include_in_schema=False)
async def legacy_connectivity_check():
    return {"message": "API is working and connected!"}
