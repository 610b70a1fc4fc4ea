"""Example: drive the service layer directly, without Flask.

Controllers are thin; everything below is what the HTTP routes call.
"""

import importlib

from config import get_settings_module

from src.qrchek.qrchek.container import build_container
from src.qrchek.qrchek.main import options_from_settings


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, options=options_from_settings(settings))

    employee = container.employee_service.list_employees()[0]
    for record in container.attendance_service.history(employee.employee_id, limit=5):
        print(record.timestamp.isoformat(), record.type.value, "(auto)" if record.auto_generated else "")

    stats = container.payroll_report_service.get_employee_stats(employee.employee_id)
    print(f"{employee.name}: {stats.hours} h, {stats.payment} EUR")


if __name__ == "__main__":
    main()
