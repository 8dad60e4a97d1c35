from fastapi import APIRouter, Depends, Request
from scriptdesk.schemas import (
    ExportOutcome,
    ExportRequest,
    ImportOutcome,
    ImportRequest,
    Script,
    ScriptFields,
    SearchRequest,
)
from scriptdesk.services.repository import ScriptRepository
from scriptdesk.services.transfer import PresetFileChooser, ScriptTransfer

router = APIRouter(prefix="/scripts", tags=["scripts"])


def get_repository(request: Request) -> ScriptRepository:
    return request.app.state.repository


def get_transfer(request: Request) -> ScriptTransfer:
    return request.app.state.transfer


@router.post("/", name="save-script", response_model=int)
async def save_script(
    script_in: ScriptFields,
    repository: ScriptRepository = Depends(get_repository)
):
    return await repository.create(script_in)


@router.get("/", name="get-all-scripts", response_model=list[Script])
async def get_all_scripts(repository: ScriptRepository = Depends(get_repository)):
    return await repository.get_all()


@router.post("/search", name="search-scripts", response_model=list[Script])
async def search_scripts(
    search_in: SearchRequest,
    repository: ScriptRepository = Depends(get_repository)
):
    return await repository.search(search_in.query, search_in.scope)


@router.put("/{script_id}", name="update-script", response_model=int)
async def update_script(
    script_id: int,
    script_in: ScriptFields,
    repository: ScriptRepository = Depends(get_repository)
):
    return await repository.update(script_id, script_in)


@router.delete("/{script_id}", name="delete-script", response_model=int)
async def delete_script(
    script_id: int,
    repository: ScriptRepository = Depends(get_repository)
):
    return await repository.delete(script_id)


@router.post("/export", name="export-script", response_model=ExportOutcome, response_model_exclude_none=True)
async def export_script(
    export_in: ExportRequest,
    transfer: ScriptTransfer = Depends(get_transfer)
):
    """
    Write one script to a text file.
    No filePath means the user closed the save dialog: { "success": false, "cancelled": true }
    """
    chooser = PresetFileChooser(export_path=export_in.file_path)
    return await transfer.export_script(export_in, chooser)


@router.post("/import", name="import-script", response_model=ImportOutcome, response_model_exclude_none=True)
async def import_script(
    import_in: ImportRequest,
    transfer: ScriptTransfer = Depends(get_transfer)
):
    """Read an English file and a Japanese file and save them as one script."""
    chooser = PresetFileChooser(english_path=import_in.english_path, japanese_path=import_in.japanese_path)
    return await transfer.import_script(chooser)
