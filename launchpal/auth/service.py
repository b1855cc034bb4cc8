import secrets, string, bcrypt
from sqlalchemy.orm import Session
from launchpal.auth.models import User
from launchpal.billing.service import PLANS
from launchpal.shared.auth import API_KEY_PREFIX
from launchpal.shared.errors import NotFound
from launchpal.shared.timeutil import utcnow

_KEY_CHARS = string.ascii_letters + string.digits

def _hash(pw: str) -> str:
    return bcrypt.hashpw(pw.encode(), bcrypt.gensalt()).decode()

def _verify(pw: str, ph: str) -> bool:
    try:
        return bcrypt.checkpw(pw.encode(), ph.encode())
    except ValueError:
        return False

def generate_api_key() -> str:
    return API_KEY_PREFIX + "".join(secrets.choice(_KEY_CHARS) for _ in range(32))

def _public(u: User) -> dict:
    return {
        "id": u.id,
        "email": u.email,
        "name": u.name,
        "apiKey": u.api_key,
        "subscription": u.subscription,
        "limits": u.limits,
    }

def register_user(db: Session, email: str, password: str, name: str | None = None) -> User:
    email = email.lower().strip()
    if db.query(User).filter(User.email == email).first():
        raise ValueError("email_already_registered")
    free = PLANS["free"]
    u = User(
        email=email,
        name=name,
        password_hash=_hash(password),
        api_key=generate_api_key(),
        subscription="free",
        monthly_requests=free["monthly_requests"],
        platform_limit=free["platforms"],
        product_limit=free["products"],
    )
    db.add(u); db.commit(); db.refresh(u)
    return u

def authenticate_user(db: Session, email: str, password: str) -> User | None:
    u = db.query(User).filter(User.email == email.lower().strip()).first()
    if not u or not _verify(password, u.password_hash):
        return None
    u.last_login = utcnow()
    db.commit()
    return u

def get_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email.lower().strip()).first()

def regenerate_api_key(db: Session, user: User) -> str:
    user.api_key = generate_api_key()
    db.commit()
    return user.api_key

def get_profile(db: Session, user_id: str) -> dict:
    from launchpal.usage.service import usage_stats

    u = db.get(User, user_id)
    if not u:
        raise NotFound("User not found")
    stats = usage_stats(db, u)
    return {
        **_public(u),
        "usage": {
            "requests": stats["total_requests"],
            "cost": stats["total_cost"],
            "remaining": u.monthly_requests - stats["total_requests"],
        },
    }
