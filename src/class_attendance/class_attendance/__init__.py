"""Class Attendance package.

Organized by feature modules (schedules, attendance, reports, roster) with a
thin Flask controller layer over service/repository layers.
"""
