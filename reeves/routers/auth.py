import logging

from fastapi import APIRouter, Depends, HTTPException

from .. import schemas, utils
from ..db import get_admin_collection
from ..services.auth_service import get_current_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=schemas.Token)
async def login(user: schemas.AdminLogin, admins=Depends(get_admin_collection)):
    admin_doc = admins.find_one({"email": user.email.lower()})
    if not admin_doc or not utils.verify_password(user.password, admin_doc.get("hashed_password")):
        logger.info(f"Rejected admin login for {user.email}")
        raise HTTPException(status_code=401, detail="Invalid credentials. Please try again.")

    token = utils.create_admin_token(admin_doc["email"])
    return {"access_token": token, "token_type": "bearer", "email": admin_doc["email"]}


@router.get("/me", response_model=schemas.AdminOut)
async def me(admin=Depends(get_current_admin)):
    return admin
