from typing import Literal
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from launchpal.shared.db import get_db
from launchpal.shared.errors import OAuthError
from launchpal.shared.timeutil import as_utc
from launchpal.auth.service import authenticate_user
from launchpal.oauth.pages import consent_page, error_page
from launchpal.oauth.service import (
    validate_authorize_request,
    issue_code,
    register_client,
    token,
    discovery_metadata,
)

router = APIRouter(tags=["OAuth"])

class ClientRegistrationIn(BaseModel):
    client_name: str = Field(min_length=1, max_length=200)
    redirect_uris: list[str] = Field(min_length=1)
    token_endpoint_auth_method: Literal["none", "client_secret_post"] = "none"
    scope: str | None = None

def _redirect(redirect_uri: str, **params) -> RedirectResponse:
    sep = "&" if "?" in redirect_uri else "?"
    query = urlencode({k: v for k, v in params.items() if v})
    return RedirectResponse(f"{redirect_uri}{sep}{query}", status_code=302)

@router.get("/oauth/authorize", response_class=HTMLResponse)
def oauth_authorize_page(
    client_id: str | None = Query(None),
    redirect_uri: str | None = Query(None),
    state: str | None = Query(None),
    scope: str | None = Query(None),
    code_challenge: str | None = Query(None),
    code_challenge_method: str | None = Query("S256"),
    db: Session = Depends(get_db),
):
    try:
        client, granted = validate_authorize_request(
            db, client_id, redirect_uri, code_challenge, code_challenge_method, scope
        )
    except OAuthError as e:
        return HTMLResponse(error_page(e.message), status_code=400)
    params = {
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "state": state,
        "scope": granted,
        "code_challenge": code_challenge,
        "code_challenge_method": code_challenge_method or "S256",
    }
    return HTMLResponse(consent_page(client.name, params))

@router.post("/oauth/authorize")
def oauth_authorize_submit(
    client_id: str = Form(...),
    redirect_uri: str = Form(...),
    code_challenge: str = Form(...),
    email: str = Form(...),
    password: str = Form(...),
    state: str | None = Form(None),
    scope: str | None = Form(None),
    code_challenge_method: str | None = Form("S256"),
    consent: str | None = Form(None),
    db: Session = Depends(get_db),
):
    try:
        client, granted = validate_authorize_request(
            db, client_id, redirect_uri, code_challenge, code_challenge_method, scope
        )
    except OAuthError as e:
        return HTMLResponse(error_page(e.message), status_code=400)

    if not consent:
        return _redirect(redirect_uri, error="access_denied", state=state)

    user = authenticate_user(db, email, password)
    if not user:
        params = {
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "state": state,
            "scope": granted,
            "code_challenge": code_challenge,
            "code_challenge_method": code_challenge_method or "S256",
        }
        return HTMLResponse(consent_page(client.name, params, error="Invalid email or password"), status_code=401)

    code = issue_code(db, user, client, redirect_uri, granted, code_challenge, code_challenge_method or "S256")
    return _redirect(redirect_uri, code=code, state=state)

@router.post("/oauth/token")
async def oauth_token(request: Request, db: Session = Depends(get_db)):
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            params = await request.json()
        except ValueError:
            raise OAuthError("request body is not valid JSON")
        if not isinstance(params, dict):
            raise OAuthError("request body must be a JSON object")
    else:
        params = dict(await request.form())
    return JSONResponse(token(db, params), headers={"Cache-Control": "no-store", "Pragma": "no-cache"})

@router.post("/oauth/register", status_code=201)
def oauth_register(inb: ClientRegistrationIn, db: Session = Depends(get_db)):
    client, secret = register_client(
        db,
        name=inb.client_name,
        redirect_uris=inb.redirect_uris,
        confidential=inb.token_endpoint_auth_method == "client_secret_post",
        scope=inb.scope,
    )
    out = {
        "client_id": client.client_id,
        "client_name": client.name,
        "redirect_uris": client.redirect_uris,
        "token_endpoint_auth_method": inb.token_endpoint_auth_method,
        "grant_types": ["authorization_code", "refresh_token"],
        "scope": client.scope,
        "client_id_issued_at": int(as_utc(client.created_at).timestamp()),
    }
    if secret:
        out["client_secret"] = secret
    return out

@router.get("/.well-known/oauth-authorization-server")
def oauth_discovery():
    return discovery_metadata()
