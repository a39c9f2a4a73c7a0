"""
Application layer: job orchestration, conversion processing, archive
streaming and the expiry reaper.
"""
