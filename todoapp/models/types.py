# todoapp type definitions
# Rev 0.1.0

from __future__ import annotations
from typing import Literal

# Read-time orderings for task listings; every mode breaks ties on id
SortMode = Literal["created", "due", "priority", "status"]

StatusFilter = Literal["all", "pending", "active", "done"]

DueLevel = Literal["none", "far", "soon", "today", "overdue"]
