"""Shared core of the Fire Door Survey application.

This package contains the code used by both the backend Flask API and the
client. It includes:

- Enums (enums.py) - door types, inspection items and defect vocabularies
- Schemas (schemas.py) - the pydantic survey record and stored row schemas
- Gap rules (gap_rules.py) and status evaluation (status.py) - PASS/FAIL scoring
- Validation (validation.py) - required fields, input checks and sanitization
- Mapper (mapper.py) - record to row flattening and the reverse for display
- Form state (form_state.py) - typed update messages and the record reducer
- Database models (models.py) - SQLAlchemy model of the survey table
- Utility functions (utils.py) - photo checks, hashing and thumbnails
"""
