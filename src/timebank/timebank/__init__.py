"""Timebank package.

Time-and-attendance engine organized by feature modules (punches, schedules,
daytypes, summary, adjustments, cycles, ...) with a thin Flask controller layer
and service/repository layers underneath.
"""
