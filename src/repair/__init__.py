"""
Repair report save pipeline: folder resolution, Drive upload, filename
normalization, sheet append and the orchestrator that ties them together.
"""
