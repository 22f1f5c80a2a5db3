# File: web_capture/report/__init__.py
"""web_capture.report: Сериализация результата захвата для CLI и тестов."""

from .json_report import render_json, result_to_dict

__all__ = ["render_json", "result_to_dict"]
