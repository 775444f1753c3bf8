"""
Forum data store: the facade (`service.DataStore`) and its result shapes.
"""

from .service import DataStore  # noqa: F401
