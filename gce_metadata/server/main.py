from typing import AsyncIterator

from fastapi import Depends, FastAPI, Request
from loguru import logger

from ..client import MetadataClient
from ..config import AppConfig
from .exceptions import install_handlers
from .models import AttributeValue, MetadataReport, ServiceStatus, ServiceStatusCode
from .report import collect_report

app = FastAPI(title="GCE metadata")
install_handlers(app)


async def get_metadata_client() -> AsyncIterator[MetadataClient]:
    """Provides a MetadataClient that is closed when the request is done."""
    async with MetadataClient(
        throw_if_not_on_gce=AppConfig().throw_if_not_on_gce
    ) as metadata:
        yield metadata


@app.get("/metadata", response_model=MetadataReport)
async def get_metadata(
    metadata: MetadataClient = Depends(get_metadata_client),
) -> MetadataReport:
    """Get all metadata of the VM the service is running on."""
    return await collect_report(metadata)


@app.get("/metadata/instance/attributes/{key}", response_model=AttributeValue)
async def get_instance_attribute(
    key: str, metadata: MetadataClient = Depends(get_metadata_client)
) -> AttributeValue:
    value = await metadata.get_instance_attribute_value(key)
    return AttributeValue(key=key, value=value)


@app.get("/metadata/project/attributes/{key}", response_model=AttributeValue)
async def get_project_attribute(
    key: str, metadata: MetadataClient = Depends(get_metadata_client)
) -> AttributeValue:
    value = await metadata.get_project_attribute_value(key)
    return AttributeValue(key=key, value=value)


@app.get("/status", response_model=ServiceStatus)
async def get_service_status(
    request: Request, metadata: MetadataClient = Depends(get_metadata_client)
) -> ServiceStatus:
    """Get the status of the service."""
    on_gce = await metadata.is_on_gce()
    message = "Running on GCE." if on_gce else "Not running on GCE."
    logger.debug(message)
    return ServiceStatus(status=ServiceStatusCode.OK, message=message, url=request.url)
