from fastapi import HTTPException

from content_studio.domain.outcomes import Rejection


def raise_for_rejection(rejection: Rejection) -> None:
    """Translate a Rejection into the HTTPException carrying its status and detail."""
    raise HTTPException(status_code=rejection.status_code, detail=rejection.to_detail())
