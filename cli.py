# cli.py

"""
Точка входа для запуска AccessScout из корня репозитория без установки пакета.

Пример запуска:
    python cli.py scan https://example.com --plan guest --json reports/report.json --html reports/report.html
    python cli.py serve --port 3000
"""
from access_scout.cli import cli


if __name__ == '__main__':
    cli()
