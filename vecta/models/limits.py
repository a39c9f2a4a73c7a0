"""
Usage limits response schema.

Dependencies: pydantic
System role: GET /limits contract
"""

from pydantic import BaseModel


class LimitsResponse(BaseModel):
    used: int
    max_conversions_per_day: int
    max_file_size: int
    max_files_per_job: int
