from pydantic import BaseModel, Field, field_validator


class RegisterDeviceRequest(BaseModel):
    device_token: str = Field(..., min_length=1, max_length=512, description="Token FCM do dispositivo")
    platform: str = Field(default="android", pattern="^(android|ios)$")

    @field_validator("device_token")
    @classmethod
    def strip_device_token(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("device_token must not be blank")
        return v


class DeviceResponse(BaseModel):
    success: bool
    message: str
