"""Word renderers for assessment results."""
from esg_ddq.models import DDQResult, IMResult
from esg_ddq.services.exporters.ddq_exporter import DDQExporter
from esg_ddq.services.exporters.im_exporter import IMExporter

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def render_ddq(result: DDQResult) -> bytes:
    return DDQExporter().export_to_word(result)


def render_im(result: IMResult) -> bytes:
    return IMExporter().export_to_word(result)


__all__ = ["render_ddq", "render_im", "DDQExporter", "IMExporter", "DOCX_MEDIA_TYPE"]
