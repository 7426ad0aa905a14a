from fastapi import APIRouter, Depends
from fastapi.responses import Response
from pydantic import BaseModel

from puremetrics.api.deps import get_firestore, get_manager
from puremetrics.core.logging import get_logger
from puremetrics.services.data_manager import DataManager
from puremetrics.services.firestore import FirestoreRemote

logger = get_logger(__name__)

router = APIRouter()


class SignInRequest(BaseModel):
    email: str
    password: str


@router.get("/status")
async def sync_status(manager: DataManager = Depends(get_manager)):
    return manager.sync_status()


@router.post("/push")
async def push(manager: DataManager = Depends(get_manager)):
    """Push every collection now and wait for the result."""
    ok = await manager.sync_now()
    return {"ok": ok, **manager.sync_status()}


@router.post("/pull")
async def pull(manager: DataManager = Depends(get_manager)):
    """Replace local data with the remote snapshot."""
    ok = await manager.load_from_remote()
    return {"ok": ok, **manager.sync_status()}


@router.post("/sign-in")
async def sign_in(
    request: SignInRequest,
    manager: DataManager = Depends(get_manager),
    remote: FirestoreRemote = Depends(get_firestore),
):
    """Sign in, then run the once-per-session resync."""
    session = await remote.sign_in(request.email, request.password)
    synced = await manager.on_sign_in()
    logger.info("sign_in_completed", user_id=session.user_id, synced=synced)
    return {"user_id": session.user_id, "synced": synced, **manager.sync_status()}


@router.post("/sign-out")
async def sign_out(
    manager: DataManager = Depends(get_manager),
    remote: FirestoreRemote = Depends(get_firestore),
):
    await manager.wait_for_sync()
    remote.sign_out()
    manager.on_sign_out()
    return manager.sync_status()


@router.get("/backup")
async def backup(manager: DataManager = Depends(get_manager)):
    return Response(
        content=manager.create_backup(),
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="puremetrics-backup.json"'},
    )
