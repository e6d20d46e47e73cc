"""
Core Engine Logic
=================

This package contains the inference fallback engine: the data model and
constraints, the credential store, prompt construction, response parsing,
post-processing, the orchestrator that walks the attempt plan, and the batch
runner used for several images.
"""
