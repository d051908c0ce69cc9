"""Table session endpoints: bind the browser to a scanned table."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from qrmenu.db.session import get_db
from qrmenu.schemas.session import SessionContext, TableScanRequest
from qrmenu.services.table_service import resolve_table_by_qr
from qrmenu.table_session import bind_table, clear_table, require_session_context

router: APIRouter = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/table", response_model=SessionContext)
def scan_table(payload: TableScanRequest, request: Request, db: Session = Depends(get_db)) -> SessionContext:
    """Resolve a scanned QR code and remember the table for this browser."""
    table = resolve_table_by_qr(db, payload.qr_code_data)
    if table is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown or inactive table")
    logger.info("[SESSION] Browser bound to table %s", table.table_number)
    return bind_table(request, table)


@router.get("", response_model=SessionContext)
def get_session(context: SessionContext = Depends(require_session_context)) -> SessionContext:
    return context


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def leave_table(request: Request) -> Response:
    clear_table(request)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
