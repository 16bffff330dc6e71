"""Data models for elastic-fluent."""

from .schemas import *
from .clauses import *
