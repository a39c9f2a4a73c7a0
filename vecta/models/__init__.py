"""
API and task payload schemas.

Dependencies: pydantic
System role: Request/response and queue message contracts
"""
