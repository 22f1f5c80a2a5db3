# web_capture/report/json_report.py

"""
Генерация JSON-отчёта для проекта web_capture.

Сериализация объекта CaptureResult в файл.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from web_capture.models import CaptureResult, StrategyOutcome


def _outcome_to_dict(outcome: StrategyOutcome) -> Dict[str, Any]:
    return {
        "strategy": outcome.strategy_name,
        "succeeded": outcome.succeeded,
        "error": (
            {"kind": outcome.error.kind, "message": outcome.error.message}
            if outcome.error
            else None
        ),
        "artifacts": {
            a.kind.value: str(a.path)
            for a in sorted(outcome.produced_artifacts, key=lambda a: a.kind.value)
        },
    }


def result_to_dict(result: CaptureResult) -> Dict[str, Any]:
    """Преобразует CaptureResult в словарь, пригодный для json.dump."""
    return {
        "input": result.target.raw_input,
        "url": result.target.normalized_url,
        "directory": str(result.directory),
        "created_at": result.created_at.isoformat(timespec="seconds"),
        "disposition": result.disposition.value,
        "succeeded": result.succeeded,
        "strategies": [_outcome_to_dict(o) for o in result.outcomes],
    }


def render_json(result: CaptureResult, output_path: Path | str) -> Path:
    """
    Сохраняет отчёт о захвате в формате JSON по указанному пути.

    :param result: объект CaptureResult
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла

    Пример:
    ```python
    from web_capture.report.json_report import render_json
    report_path = render_json(result, 'reports/capture.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(result_to_dict(result), f, ensure_ascii=False, indent=2)

    return output
