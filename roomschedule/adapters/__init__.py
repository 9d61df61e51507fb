"""
Adapters layer - Appointment persistence (JSON and CSV files).
"""

from .csv_store import CsvAppointmentStore
from .json_store import AppointmentRecord, JsonAppointmentStore

__all__ = ["AppointmentRecord", "CsvAppointmentStore", "JsonAppointmentStore"]
