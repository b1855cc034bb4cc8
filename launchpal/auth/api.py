# launchpal/auth/api.py
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.orm import Session

from launchpal.shared.db import get_db
from launchpal.shared.auth import create_access_token, get_user, require_scope
from launchpal.shared.config import settings
from launchpal.auth.service import register_user, authenticate_user, regenerate_api_key, get_profile, _public

router = APIRouter(prefix="/auth", tags=["Auth"])

class RegisterIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    name: str | None = Field(default=None, max_length=200)

class LoginIn(BaseModel):
    email: EmailStr
    password: str

@router.post("/register", status_code=201)
def api_register(inb: RegisterIn, db: Session = Depends(get_db)):
    try:
        user = register_user(db, inb.email, inb.password, inb.name)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return {"ok": True, "user": _public(user)}

@router.post("/login")
def api_login(inb: LoginIn, db: Session = Depends(get_db)):
    user = authenticate_user(db, inb.email, inb.password)
    if not user:
        raise HTTPException(401, "invalid credentials")
    token = create_access_token(sub=user.id)
    return {
        "token": token,
        "token_type": "bearer",
        "expires_in": settings.JWT_EXPIRE_MIN * 60,
        "user": _public(user),
    }

@router.get("/me")
def api_me(user = Depends(get_user), db: Session = Depends(get_db)):
    return {"ok": True, "user": get_profile(db, user.id)}

@router.post("/api-key/regenerate")
def api_regenerate_key(user = Depends(require_scope("write")), db: Session = Depends(get_db)):
    return {"apiKey": regenerate_api_key(db, user)}
