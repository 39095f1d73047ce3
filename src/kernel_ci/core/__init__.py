"""
Core orchestration logic: inputs, target selection, external processes,
workflow commands and the stage pipeline.
"""
