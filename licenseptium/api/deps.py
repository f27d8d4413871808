from fastapi import Request
from sqlalchemy.orm import Session

from licenseptium.config import Settings


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Session:
    db = request.app.state.sessionmaker()
    try:
        yield db
    finally:
        db.close()


def get_client_address(request: Request) -> str | None:
    # Peer address only. Forwarding headers are caller controlled.
    if request.client:
        return request.client.host
    return None
