"""Shared route dependencies."""

from typing import Annotated

import httpx
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from opsboard.core.database import get_db
from opsboard.services.http_client import get_http_client

DbSession = Annotated[AsyncSession, Depends(get_db)]
HttpClient = Annotated[httpx.AsyncClient, Depends(get_http_client)]

__all__ = ["DbSession", "HttpClient", "get_db", "get_http_client"]
