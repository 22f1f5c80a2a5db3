# === FILE: web_capture/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для захвата страницы через командную строку.

Использование:
  web-capture [OPTIONS] URL

URL может быть полным адресом или просто именем хоста (будет добавлен https://).
Страница загружается двумя независимыми способами: статическим HTTP-запросом и
через браузер (HTML + снимок экрана). Результаты сохраняются в
outputs/<timestamp>_<host>/.

Опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --output-dir DIR    Базовая директория результатов (override output_dir)
  --concurrent        Запускать обе стратегии одновременно
  --atomic-writes     Сохранять артефакты браузера только целиком
  --headed            Настоящее окно браузера за пределами экрана
  --json PATH         Сохранить JSON-отчёт о захвате
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования
  --version, -v       Показать версию

Коды выхода: 0 – сохранён хотя бы один результат; 1 – неверные аргументы,
фатальная ошибка или обе стратегии провалились.

Пример:
  web-capture example.com --json capture.json
"""
import asyncio
import sys
from pathlib import Path

import click

from web_capture import __version__
from web_capture.config import load_config
from web_capture.engine import start_capture
from web_capture.errors import CaptureError
from web_capture.logger import init_logging
from web_capture.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='web_capture, version %(version)s')
@click.argument('targets', nargs=-1, metavar='URL')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--output-dir', '-o', 'output_dir',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Базовая директория результатов (override output_dir)'
)
@click.option('--concurrent', is_flag=True, help='Запускать обе стратегии одновременно')
@click.option('--atomic-writes', is_flag=True, help='Сохранять HTML и снимок браузера только вместе')
@click.option('--headed', is_flag=True, help='Не headless: окно браузера за пределами экрана')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
def cli(targets, config_path, output_dir, concurrent, atomic_writes, headed,
        json_output, log_level, log_file, log_format):
    """Сохранить одну страницу: статический HTML, HTML из браузера и снимок."""
    if len(targets) != 1:
        print_error('usage: web-capture [OPTIONS] URL')

    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except (OSError, ValueError, TypeError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')

    overrides = {}
    if output_dir is not None:
        overrides['output_dir'] = output_dir
    if concurrent:
        overrides['concurrent'] = True
    if atomic_writes:
        overrides['atomic_writes'] = True
    if headed:
        overrides['render'] = cfg.render.model_copy(update={'headless': False})
    if overrides:
        cfg = cfg.model_copy(update=overrides)

    try:
        result = asyncio.run(start_capture(targets[0], cfg))
    except CaptureError as e:
        print_error(f'Захват не выполнен: {e}')
    except KeyboardInterrupt:
        print_error('Прервано пользователем')

    if json_output:
        try:
            saved_json = render_json(result, json_output)
            click.echo(f'JSON report: {saved_json}')
        except OSError as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    click.echo('\nResults:')
    click.echo(f'Static:   {result.static.succeeded}')
    click.echo(f'Rendered: {result.rendered.succeeded}')
    for outcome in result.outcomes:
        if outcome.error:
            click.echo(f'  {outcome.strategy_name}: {outcome.error.kind}: {outcome.error.message}')

    if not result.succeeded:
        print_error(f'Both strategies failed. No result saved; {result.directory} was removed.')
    click.echo(f'Saved to: {result.directory}')


if __name__ == "__main__":
    cli()
