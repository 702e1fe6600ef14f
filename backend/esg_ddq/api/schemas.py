# esg_ddq/api/schemas.py
"""Request bodies for the HTTP surface.

Inputs are Optional at this layer so an absent field becomes a 400 with a
readable message instead of a generic body-validation error.
"""
from typing import Any, Dict, Optional

from esg_ddq.models import CamelModel, CompanyProfile, DDQResult, IMResult


class ExtractInfoRequest(CamelModel):
    text: Optional[str] = None


class GenerateDDQRequest(CamelModel):
    company_info: Optional[CompanyProfile] = None
    extracted_text: Optional[str] = None


class GenerateIMRequest(CamelModel):
    company_info: Optional[CompanyProfile] = None
    ddq_result: Optional[DDQResult] = None
    extracted_text: Optional[str] = None


class DownloadDDQRequest(CamelModel):
    ddq_result: Optional[DDQResult] = None


class DownloadIMRequest(CamelModel):
    im_result: Optional[IMResult] = None


class UploadResponse(CamelModel):
    text: str
    metadata: Dict[str, Any]
    file_name: str
    request_id: str
