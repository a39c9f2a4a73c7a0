"""
Vecta Convert backend.

Batch image conversion: presigned uploads, queued conversions, expiring jobs.
"""
