"""
Coleta Backend — ORM Models
=============================

Importing this package registers every table with Base.metadata
(used by Alembic --autogenerate and by the test suite's create_all).
"""

from app.models.cooperative import Cooperative
from app.models.device import Device
from app.models.material import Material
from app.models.measurement import Measurement
from app.models.worker import Worker

__all__ = ["Cooperative", "Device", "Material", "Measurement", "Worker"]
