class StoreError(Exception):
    """Account store unavailable or a read/write against it failed"""
