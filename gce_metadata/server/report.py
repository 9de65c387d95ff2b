import asyncio

from loguru import logger

from ..client import MetadataClient
from .models import MetadataReport


async def collect_report(metadata: MetadataClient) -> MetadataReport:
    """Retrieve all metadata fields the report consists of.

    The presence check is done first, the fields are then fetched in
    parallel. Fields that fail are logged and reported as empty values.
    """
    on_gce = await metadata.is_on_gce()
    logger.info("On GCE: {}", "Yes" if on_gce else "No")

    coros = {
        "project_id": metadata.get_project_id(),
        "numeric_project_id": metadata.get_numeric_project_id(),
        "instance_id": metadata.get_instance_id(),
        "internal_ip": metadata.get_internal_ip(),
        "default_sa_email": metadata.get_email(),
        "external_ip": metadata.get_external_ip(),
        "hostname": metadata.get_hostname(),
        "instance_tags": metadata.get_instance_tags(),
        "instance_name": metadata.get_instance_name(),
        "zone": metadata.get_zone(),
        "instance_attributes": metadata.get_instance_attributes(),
        "project_attributes": metadata.get_project_attributes(),
        "default_sa_scopes": metadata.get_scopes(),
    }
    results = await asyncio.gather(*coros.values(), return_exceptions=True)

    fields = {}
    for name, result in zip(coros, results):
        if isinstance(result, BaseException):
            logger.error("Error getting metadata field {}: {!r}", name, result)
            result = None
        fields[name] = result
    logger.info("Got all metadata")
    return MetadataReport(on_gce=on_gce, **fields)
