"""
Standardized pagination parameters for list endpoints.
"""

from typing import Annotated

from fastapi import Query

PaginationSkip = Annotated[int, Query(ge=0, description="Number of records to skip")]

# Map views load every pin of a community at once, hence the high ceiling
PaginationLimit = Annotated[
    int, Query(ge=1, le=500, description="Maximum number of records to return")
]

DEFAULT_LIMIT = 100
