"""Timbrature package.

Attendance validation engine for scheduled shifts: check-in/check-out
recording, tolerance-based validation, anomaly workflow and wellbeing stats.
Organized by feature modules (shifts, attendance, anomalies, ...) with a thin
Flask controller layer over service/repository layers.
"""
