"""Admin router - authenticated browse/edit/delete/export of submissions"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import StreamingResponse

from ...auth import require_admin
from ...shared.exceptions import InvalidSubmissionError, UnknownFormTypeError
from .repository import RecordStore
from .schemas import FormType, SubmissionList, SubmissionMutation
from .stores import StoreProvider, get_store_provider

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Admin"], dependencies=[Depends(require_admin)])


def get_form_store(
    formType: str,
    store_provider: StoreProvider = Depends(get_store_provider),
) -> RecordStore:
    """Resolve the {formType} path segment to its store"""
    form_type = FormType.from_slug(formType)
    if form_type is None:
        raise UnknownFormTypeError(f"Unknown form type: {formType}")
    return store_provider(form_type)


@router.get("/admin/api/submissions/{formType}", response_model=SubmissionList)
def list_submissions(
    store: RecordStore = Depends(get_form_store),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    sortBy: str = Query("timestamp"),
    sortOrder: str = Query("desc"),
):
    """List submissions with search, sort and pagination"""
    return store.list(
        search=search, sort_by=sortBy, sort_order=sortOrder, page=page, page_size=limit
    )


@router.get("/admin/api/submissions/{formType}/{id}")
def get_submission(id: str, store: RecordStore = Depends(get_form_store)) -> dict[str, Any]:
    """Get a single submission by ID"""
    return store.get(id)


@router.put("/admin/api/submissions/{formType}/{id}", response_model=SubmissionMutation)
def update_submission(
    id: str,
    updates: Any = Body(...),
    store: RecordStore = Depends(get_form_store),
):
    """Overwrite the given fields of a submission; the timestamp is refreshed"""
    if not isinstance(updates, dict):
        raise InvalidSubmissionError("Request body must be a JSON object")

    record = store.update(id, updates)
    return SubmissionMutation(message="Submission updated successfully", data=record)


@router.delete("/admin/api/submissions/{formType}/{id}", response_model=SubmissionMutation)
def delete_submission(id: str, store: RecordStore = Depends(get_form_store)):
    """Delete a submission"""
    record = store.delete(id)
    return SubmissionMutation(message="Submission deleted successfully", data=record)


@router.get("/download-csv/{formType}")
def download_csv(store: RecordStore = Depends(get_form_store)):
    """Download every submission of a form type as CSV"""
    filename = f"{store.form_type.slug}_submissions.csv"
    logger.info(f"📊 CSV export requested for {store.form_type.value}")
    return StreamingResponse(
        store.iter_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
