from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ErrorItem(BaseModel):
    error: str
    error_description: str
    field: Optional[str] = None


class ErrorResponse(BaseModel):
    errors: List[ErrorItem]


# Modules


class ModuleCreateRequest(BaseModel):
    type: int


class ModuleUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=50)


class ColorRequest(BaseModel):
    red: int = Field(ge=0, le=255)
    green: int = Field(ge=0, le=255)
    blue: int = Field(ge=0, le=255)


class LoopRequest(BaseModel):
    loop: Optional[str] = None


class ApiKeyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field(alias="apiKey", min_length=1)


class LocationRequest(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)


# Guirlande


class GuirlandeColorRequest(BaseModel):
    color: Union[str, ColorRequest]


# Projects


class ProjectCreateRequest(BaseModel):
    name: str
    description: Optional[str] = None
    href: str


class ProjectUpdateRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    href: Optional[str] = None

    def changes(self, partial: bool) -> Dict[str, Any]:
        """Fields to apply: only those sent for PATCH, all of them for PUT"""
        if partial:
            return self.model_dump(exclude_unset=True)
        return self.model_dump()
