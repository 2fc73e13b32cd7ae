"""Mira Attendance package.

The attendance-capture pipeline (identify a student, run the simulated
biometric capture, geofence the position, commit to the ledger and notify)
organized by feature modules with a thin Flask controller layer over
service/repository layers.
"""
