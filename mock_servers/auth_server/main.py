from fastapi import FastAPI, Header, HTTPException
from fastapi.responses import JSONResponse, Response
from pathlib import Path
import json
import os
import time
import uuid

app = FastAPI(title="Mock Identity Server", version="1.0.0")
# Operators file: [{"id": ..., "email": ..., "password": ...}]
USERS_FILE = Path(os.environ.get("MOCK_AUTH_USERS", Path(__file__).resolve().parent / "users.json"))
TOKENS: dict[str, dict] = {}
REFRESH_TOKENS: dict[str, dict] = {}
TOKEN_TTL_SECONDS = 3600


def load_users() -> list[dict]:
    if not USERS_FILE.exists():
        return [{"id": "00000000-0000-0000-0000-000000000001", "email": "admin@comissio.local", "password": "admin"}]
    return json.loads(USERS_FILE.read_text())


def issue_session(user: dict) -> dict:
    access_token = uuid.uuid4().hex
    refresh_token = uuid.uuid4().hex
    TOKENS[access_token] = user
    REFRESH_TOKENS[refresh_token] = user
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "expires_in": TOKEN_TTL_SECONDS,
        "expires_at": int(time.time()) + TOKEN_TTL_SECONDS,
        "refresh_token": refresh_token,
        "user": {"id": user["id"], "email": user["email"]},
    }


@app.get("/health")
def health(): return {"status": "ok"}


@app.post("/auth/v1/token")
def token(grant_type: str, body: dict):
    if grant_type == "refresh_token":
        # Refresh tokens are single use
        user = REFRESH_TOKENS.pop(body.get("refresh_token", ""), None)
        if user is None:
            return JSONResponse(status_code=400, content={"error": "invalid_grant", "error_description": "Invalid Refresh Token: Refresh Token Not Found"})
        return JSONResponse(content=issue_session(user))
    if grant_type != "password":
        raise HTTPException(status_code=400, detail="unsupported_grant_type")
    for user in load_users():
        if user["email"] == body.get("email") and user["password"] == body.get("password"):
            return JSONResponse(content=issue_session(user))
    return JSONResponse(status_code=400, content={"error": "invalid_grant", "error_description": "Invalid login credentials"})


@app.get("/auth/v1/user")
def user(authorization: str = Header(default="")):
    user = TOKENS.get(authorization.removeprefix("Bearer ").strip())
    if user is None:
        return JSONResponse(status_code=401, content={"msg": "invalid JWT"})
    return {"id": user["id"], "email": user["email"]}


@app.post("/auth/v1/logout")
def logout(authorization: str = Header(default="")):
    TOKENS.pop(authorization.removeprefix("Bearer ").strip(), None)
    return Response(status_code=204)
