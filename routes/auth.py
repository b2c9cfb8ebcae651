from fastapi import APIRouter, Depends
from models.user import UserModel
from routes.deps import get_current_user

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

# Credentials are verified by the identity provider that issues the bearer
# tokens; this service only resolves a token to the stored user.


@router.get("/me")
async def get_me(current_user: UserModel = Depends(get_current_user)):
    """The principal behind the presented token."""
    return current_user.model_dump()
