"""End-to-end provisioning: copy the template, place it, share it, load data."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from provisioner import csv_loader, dispatcher, drive_api
from provisioner.auth import GoogleServices
from provisioner.dispatcher import BatchReport
from provisioner.operations import ProvisionConfig
from provisioner.sheets_client import GoogleSheetsClient

logger = logging.getLogger(__name__)

__all__ = ["ProvisionResult", "create_and_update_spreadsheet"]


@dataclass
class ProvisionResult:
    spreadsheet_id: str
    url: str
    report: BatchReport


def create_and_update_spreadsheet(
    config: ProvisionConfig,
    services: GoogleServices,
    *,
    load: Callable[[str], csv_loader.TabularData] = csv_loader.load,
) -> ProvisionResult:
    """Provision a spreadsheet described by an already validated ``config``.

    Steps run strictly in order and any failure stops the run: the template
    is copied, moved into the target folder, shared with the organisation
    domain, then every data operation is applied.
    """

    source_id = drive_api.extract_spreadsheet_id(config.template_url)

    created = drive_api.copy_file(services.drive, source_id, config.new_spreadsheet_name)
    file_id = created["id"]
    drive_api.move_file_to_folder(services.drive, file_id, config.folder_id, config.shared_drive_id)
    drive_api.share_with_domain(services.drive, file_id, config.org_domain)

    handle = GoogleSheetsClient(file_id, services.sheets)
    report = dispatcher.run(handle, config.operations, load=load)

    url = drive_api.spreadsheet_url(file_id)
    logger.info("New spreadsheet created successfully: %s (%s)", url, report.summary())
    return ProvisionResult(spreadsheet_id=file_id, url=url, report=report)
