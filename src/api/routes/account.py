from fastapi import APIRouter, Depends

from src.app.use_cases.auth import AccountInfo
from src.depends import require_session
from src.domain.entities import SessionRecord

router = APIRouter(tags=["Account"])


@router.get("/me", response_model=AccountInfo)
async def me(session: SessionRecord = Depends(require_session)):
    """
    Protected content: the logged-in account.

    Served from the session snapshot; edits made to the account after
    login are not visible until the next login.
    """
    return AccountInfo.from_snapshot(session.account)
