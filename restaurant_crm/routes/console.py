"""
Restaurant CRM Backend - Development Database Console
======================================================

What:  GET /db-console/ returns the database dialect and a row count for
       every mapped table.
How:   Read-only; issues one COUNT(*) per table in Base.metadata.
When:  Mounted by create_app() only when ENVIRONMENT is not production.
       The access policy leaves /db-console/** open, so this must never
       expose row contents.
"""

from typing import Dict

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_crm.database import Base, get_db_session
from restaurant_crm.schemas.system import ConsoleResponse

router = APIRouter(prefix="/db-console", tags=["Console"])


@router.get("/", response_model=ConsoleResponse, summary="Database overview")
async def console_overview(db: AsyncSession = Depends(get_db_session)) -> ConsoleResponse:
    tables: Dict[str, int] = {}
    for name, table in sorted(Base.metadata.tables.items()):
        result = await db.execute(select(func.count()).select_from(table))
        tables[name] = result.scalar() or 0
    return ConsoleResponse(dialect=db.get_bind().dialect.name, tables=tables)
