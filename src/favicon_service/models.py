from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True, slots=True)
class UploadedImage:
    """ Image uploaded as a multipart file """
    data: bytes


@dataclass(frozen=True, slots=True)
class RemoteImage:
    """ Image to download from a remote url """
    url: str


@dataclass(frozen=True, slots=True)
class EncodedImage:
    """ Image embedded as raw base64 or as a base64 data URI """
    payload: str


ImageSource = UploadedImage | RemoteImage | EncodedImage


class FaviconResponse(BaseModel):
    favicon: str


class ErrorResponse(BaseModel):
    error: str


class FaviconRequest(BaseModel):
    """ JSON or url-encoded body of ``POST /favicon`` """

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    image_url: str | None = Field(default=None, alias='imageUrl')
    image_base64: str | None = Field(default=None, alias='imageBase64')
