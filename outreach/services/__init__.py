"""
services/ — Cadence engine and the database-facing services around it.

Pure modules (no I/O): business_classifier, call_timing, cadence_generator,
pipeline_rules, session_outcomes, and build_session_queue in session_queue.
Database modules take a SQLAlchemy Session: cadence_service,
activity_service, and load_session_queue.
"""
