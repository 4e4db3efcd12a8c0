from typing import Optional

from fastapi import APIRouter, Depends, Header

from ..core.context import ServiceContext
from .dependencies import User, get_context, get_current_user, require_user
from .models import ColorRequest, ErrorResponse, GuirlandeColorRequest

CODE_HEADER = "X-Guirlande-Code"

router = APIRouter(
    prefix="/guirlande",
    tags=["guirlande"],
    responses={403: {"model": ErrorResponse}},
)


async def check_access(
    code: Optional[str] = Header(default=None, alias=CODE_HEADER),
    user: Optional[User] = Depends(get_current_user),
    context: ServiceContext = Depends(get_context),
) -> None:
    """Gate for public control of the guirlande"""
    await context.guirlande.check_access(user, code)


@router.get("", dependencies=[Depends(check_access)])
async def guirlande_info(context: ServiceContext = Depends(get_context)):
    return {"guirlande": await context.guirlande.info()}


@router.post("/access")
async def toggle_access(
    context: ServiceContext = Depends(get_context),
    user: User = Depends(require_user),
):
    access = await context.guirlande.toggle_access()
    return {"access": int(access)}


@router.get("/code")
async def get_code(context: ServiceContext = Depends(get_context)):
    return {"code": await context.guirlande.get_code()}


@router.post("/code")
async def generate_code(
    context: ServiceContext = Depends(get_context),
    user: User = Depends(require_user),
):
    return {"code": await context.guirlande.generate_code()}


@router.post("/color", dependencies=[Depends(check_access)])
async def send_color(
    request: GuirlandeColorRequest, context: ServiceContext = Depends(get_context)
):
    if isinstance(request.color, ColorRequest):
        color = request.color
        context.guirlande.set_color_rgb(color.red, color.green, color.blue)
    else:
        context.guirlande.set_color_hex(request.color)
    return {"color": context.guirlande.color.to_hex()}


@router.post("/presets", dependencies=[Depends(check_access)])
async def toggle_presets(context: ServiceContext = Depends(get_context)):
    return {"status": context.guirlande.toggle_presets()}
