"""
Folder routes: create, rename, delete.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from ..config import get_db
from ..database import Database
from ..exceptions import require_folder
from ..schemas import FolderResponse, FolderRequest

router = APIRouter(prefix="/folders", tags=["folders"])


def _require_name(request: FolderRequest) -> str:
    name = request.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Folder name is required")
    return name


@router.get("")
async def list_folders(
    db: Annotated[Database, Depends(get_db)]
) -> list[FolderResponse]:
    return [FolderResponse.from_db(f) for f in db.get_folders()]


@router.post("")
async def add_folder(
    request: FolderRequest,
    db: Annotated[Database, Depends(get_db)]
) -> FolderResponse:
    """Create a folder at the end of the list."""
    folder_id = db.add_folder(_require_name(request))
    folder = db.get_folder(folder_id)
    if not folder:
        raise HTTPException(status_code=500, detail="Failed to retrieve folder")
    return FolderResponse.from_db(folder)


@router.put("/{folder_id}")
async def rename_folder(
    folder_id: int,
    request: FolderRequest,
    db: Annotated[Database, Depends(get_db)]
) -> FolderResponse:
    require_folder(db.get_folder(folder_id))
    db.rename_folder(folder_id, _require_name(request))
    return FolderResponse.from_db(require_folder(db.get_folder(folder_id)))


@router.delete("/{folder_id}")
async def delete_folder(
    folder_id: int,
    db: Annotated[Database, Depends(get_db)]
) -> dict:
    """Delete a folder. Its feeds are kept, outside any folder."""
    require_folder(db.get_folder(folder_id))
    db.delete_folder(folder_id)
    return {"success": True}
