from typing import Any, Dict

from fastapi import APIRouter, Depends, Response

from ..common.exceptions import NotFoundError
from ..core.context import ServiceContext
from ..core.documents import ProjectDocument
from .dependencies import User, get_context, require_user
from .models import ErrorResponse, ProjectCreateRequest, ProjectUpdateRequest

router = APIRouter(
    prefix="/projects",
    tags=["projects"],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


def serialize_project(doc: ProjectDocument) -> Dict[str, Any]:
    return {
        "id": doc.id,
        "name": doc.name,
        "description": doc.description,
        "href": doc.href,
        "createdAt": doc.created_at.isoformat(),
        "updatedAt": doc.updated_at.isoformat(),
    }


async def _get_project(context: ServiceContext, project_id: str) -> ProjectDocument:
    doc = await context.store.projects.find_by_id(project_id)
    if doc is None:
        raise NotFoundError(f"Project {project_id} not found")
    return doc


@router.get("")
async def list_projects(context: ServiceContext = Depends(get_context)):
    docs = await context.store.projects.find_all()
    return {"projects": [serialize_project(doc) for doc in docs]}


@router.get("/{project_id}")
async def get_project(project_id: str, context: ServiceContext = Depends(get_context)):
    return {"project": serialize_project(await _get_project(context, project_id))}


@router.post("", status_code=201)
async def create_project(
    request: ProjectCreateRequest,
    context: ServiceContext = Depends(get_context),
    user: User = Depends(require_user),
):
    doc = await context.store.projects.create(request.model_dump())
    return {"id": doc.id}


async def _apply(context: ServiceContext, project_id: str, changes: Dict[str, Any]):
    doc = await _get_project(context, project_id)
    for key, value in changes.items():
        setattr(doc, key, value)
    await context.store.projects.save(doc)
    return {"id": doc.id}


@router.put("/{project_id}")
async def replace_project(
    project_id: str,
    request: ProjectUpdateRequest,
    context: ServiceContext = Depends(get_context),
    user: User = Depends(require_user),
):
    return await _apply(context, project_id, request.changes(partial=False))


@router.patch("/{project_id}")
async def update_project(
    project_id: str,
    request: ProjectUpdateRequest,
    context: ServiceContext = Depends(get_context),
    user: User = Depends(require_user),
):
    return await _apply(context, project_id, request.changes(partial=True))


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: str,
    context: ServiceContext = Depends(get_context),
    user: User = Depends(require_user),
):
    if not await context.store.projects.delete_by_id(project_id):
        raise NotFoundError(f"Project {project_id} not found")
    return Response(status_code=204)
