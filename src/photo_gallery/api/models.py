"""Request bodies for the local gallery API."""

import base64
import binascii

from pydantic import BaseModel, Field, field_validator


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)


class CreateAlbumRequest(BaseModel):
    name: str = Field(min_length=1)


class CoverRequest(BaseModel):
    photo_id: str


class CredentialRequest(BaseModel):
    api_key: str


class UploadedImage(BaseModel):
    """An image sent as base64-encoded bytes."""

    name: str
    content_base64: str

    @field_validator("content_base64")
    @classmethod
    def _check_base64(cls, value: str) -> str:
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("content_base64 is not valid base64") from exc
        return value

    def content(self) -> bytes:
        return base64.b64decode(self.content_base64)


class UploadPhotosRequest(BaseModel):
    photos: list[UploadedImage] = Field(min_length=1)


class TextSearchRequest(BaseModel):
    query: str


class FaceSearchRequest(BaseModel):
    image: UploadedImage
