from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from starlette.datastructures import URL


class MetadataReport(BaseModel):
    """Snapshot of the metadata of the VM the service is running on.

    Values that could not be retrieved are reported as empty strings/lists.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "on_gce": True,
                "project_id": "my-project",
                "numeric_project_id": "424242",
                "instance_id": "1234567890123456789",
                "internal_ip": "10.0.0.42",
                "default_sa_email": "424242-compute@developer.gserviceaccount.com",
                "external_ip": "34.0.0.42",
                "hostname": "vm-1.europe-west3-c.c.my-project.internal",
                "instance_tags": ["http-server"],
                "instance_name": "vm-1",
                "zone": "europe-west3-c",
                "instance_attributes": ["ssh-keys"],
                "project_attributes": ["enable-oslogin"],
                "default_sa_scopes": [
                    "https://www.googleapis.com/auth/cloud-platform"
                ],
            }
        }
    )

    on_gce: bool = Field(..., description="Whether the service runs on GCE.")
    project_id: str = ""
    numeric_project_id: str = ""
    instance_id: str = ""
    internal_ip: str = ""
    default_sa_email: str = ""
    external_ip: str = ""
    hostname: str = ""
    instance_tags: list[str] = Field(default_factory=list)
    instance_name: str = ""
    zone: str = ""
    instance_attributes: list[str] = Field(default_factory=list)
    project_attributes: list[str] = Field(default_factory=list)
    default_sa_scopes: list[str] = Field(default_factory=list)

    @field_validator(
        "project_id",
        "numeric_project_id",
        "instance_id",
        "internal_ip",
        "default_sa_email",
        "external_ip",
        "hostname",
        "instance_name",
        "zone",
        mode="before",
    )
    @classmethod
    def none_to_empty_str(cls, v: Optional[str]) -> str:
        return "" if v is None else v

    @field_validator(
        "instance_tags",
        "instance_attributes",
        "project_attributes",
        "default_sa_scopes",
        mode="before",
    )
    @classmethod
    def none_to_empty_list(cls, v: Optional[list[Any]]) -> list[Any]:
        return [] if v is None else v


class AttributeValue(BaseModel):
    key: str = Field(..., description="Name of the attribute.")
    value: Optional[str] = Field(
        None, description="Value of the attribute. `null` when not running on GCE."
    )


class ServiceStatusCode(Enum):
    OK = "OK"


class ServiceStatus(BaseModel):
    status: ServiceStatusCode = Field(..., description="The status of the service.")
    message: Optional[str] = Field(
        None, description="Additional information about the status."
    )
    url: str = Field(..., description="URL of the service.")

    @field_validator("url", mode="before")
    @classmethod
    def coerce_url_str(cls, v: Union[str, URL]) -> str:
        if isinstance(v, str):
            return v
        return str(v)
