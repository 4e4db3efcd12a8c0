import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Response

from ..common.exceptions import ValidationError
from ..core.context import ServiceContext
from ..core.documents import ModuleType
from ..modules.loop import Loop
from .dependencies import User, get_context, require_user
from .models import (
    ApiKeyRequest,
    ColorRequest,
    ErrorResponse,
    LocationRequest,
    LoopRequest,
    ModuleCreateRequest,
    ModuleUpdateRequest,
)

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/modules",
    tags=["modules"],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


@router.get("")
async def list_modules(context: ServiceContext = Depends(get_context)):
    return {"modules": [module.to_summary() for module in context.modules.modules]}


@router.get("/{module_id}")
async def get_module(module_id: str, context: ServiceContext = Depends(get_context)):
    return {"module": context.modules.get(module_id).to_summary()}


@router.post("")
async def register_module(
    request: ModuleCreateRequest, context: ServiceContext = Depends(get_context)
):
    """Register a new device; it stays unusable until validated"""
    module = await context.modules.create(request.type)
    return {"id": module.id, "token": module.token}


@router.post("/{module_id}/token")
async def regenerate_token(
    module_id: str,
    context: ServiceContext = Depends(get_context),
    user: User = Depends(require_user),
):
    module = context.modules.get(module_id)
    return {"token": await module.generate_token()}


@router.put("/{module_id}")
async def replace_module(
    module_id: str,
    request: ModuleUpdateRequest,
    context: ServiceContext = Depends(get_context),
    user: User = Depends(require_user),
):
    module = context.modules.get(module_id)
    module.name = request.name
    await module.save()
    return {"id": module.id}


@router.patch("/{module_id}")
async def update_module(
    module_id: str,
    request: ModuleUpdateRequest,
    context: ServiceContext = Depends(get_context),
    user: User = Depends(require_user),
):
    module = context.modules.get(module_id)
    if "name" in request.model_fields_set:
        module.name = request.name
        await module.save()
    return {"id": module.id}


@router.put("/{module_id}/validate")
async def validate_module(
    module_id: str,
    context: ServiceContext = Depends(get_context),
    user: User = Depends(require_user),
):
    module = context.modules.get(module_id)
    await module.validate()
    return {"id": module.id, "validated": module.validated}


@router.put("/{module_id}/invalidate")
async def invalidate_module(
    module_id: str,
    context: ServiceContext = Depends(get_context),
    user: User = Depends(require_user),
):
    module = context.modules.get(module_id)
    await module.invalidate()
    return {"id": module.id, "validated": module.validated}


@router.post("/{module_id}/disconnect")
async def disconnect_module(
    module_id: str,
    context: ServiceContext = Depends(get_context),
    user: User = Depends(require_user),
):
    module = context.modules.get(module_id)
    module.disconnect()
    return {"id": module.id, "status": int(module.status)}


@router.delete("/{module_id}", status_code=204)
async def delete_module(
    module_id: str,
    context: ServiceContext = Depends(get_context),
    user: User = Depends(require_user),
):
    module = context.modules.get(module_id)
    await context.modules.delete(module)
    return Response(status_code=204)


# LED strip


@router.post("/{module_id}/color")
async def send_color(
    module_id: str,
    request: ColorRequest,
    context: ServiceContext = Depends(get_context),
    user: User = Depends(require_user),
):
    module = context.modules.get(module_id, ModuleType.LED_STRIP)
    await module.send_color(request.red, request.green, request.blue)
    return {"id": module.id}


@router.post("/{module_id}/loop")
async def send_loop(
    module_id: str,
    request: LoopRequest,
    context: ServiceContext = Depends(get_context),
    user: User = Depends(require_user),
):
    """Send a loop script; an absent loop stops the device loop"""
    module = context.modules.get(module_id, ModuleType.LED_STRIP)
    loop = Loop.parse(request.loop) if request.loop is not None else None
    await module.send_loop(loop)
    return {"id": module.id}


# Shutter


@router.post("/{module_id}/up")
async def shutter_up(
    module_id: str,
    context: ServiceContext = Depends(get_context),
    user: User = Depends(require_user),
):
    module = context.modules.get(module_id, ModuleType.SHUTTER)
    module.up()
    return {"id": module.id}


@router.post("/{module_id}/down")
async def shutter_down(
    module_id: str,
    context: ServiceContext = Depends(get_context),
    user: User = Depends(require_user),
):
    module = context.modules.get(module_id, ModuleType.SHUTTER)
    module.down()
    return {"id": module.id}


@router.post("/{module_id}/stop")
async def shutter_stop(
    module_id: str,
    context: ServiceContext = Depends(get_context),
    user: User = Depends(require_user),
):
    module = context.modules.get(module_id, ModuleType.SHUTTER)
    module.stop()
    return {"id": module.id}


# Weather


@router.post("/{module_id}/apiKey")
async def send_api_key(
    module_id: str,
    request: ApiKeyRequest,
    context: ServiceContext = Depends(get_context),
    user: User = Depends(require_user),
):
    module = context.modules.get(module_id, ModuleType.WEATHER)
    await module.send_api_key(request.api_key)
    return {"id": module.id}


@router.post("/{module_id}/location")
async def send_location(
    module_id: str,
    request: LocationRequest,
    context: ServiceContext = Depends(get_context),
    user: User = Depends(require_user),
):
    module = context.modules.get(module_id, ModuleType.WEATHER)
    await module.send_location(request.lat, request.lon)
    return {"id": module.id}


# Test


@router.post("/{module_id}/data")
async def send_data(
    module_id: str,
    data: Any = Body(default=None),
    context: ServiceContext = Depends(get_context),
    user: User = Depends(require_user),
):
    if context.config.is_production:
        raise ValidationError.for_field(
            "type", "Test modules are unavailable in production"
        )
    module = context.modules.get(module_id, ModuleType.TEST)
    module.send_data(data)
    return {"id": module.id}
