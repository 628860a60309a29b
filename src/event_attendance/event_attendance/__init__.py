"""Event Attendance package.

Feature modules (students, events, attendance, qr, ...) with a thin Flask
controller layer over service/repository layers. The attendance admission
engine lives in ``attendance`` and ``qr``.
"""
