"""
Station Directory Test Suite

This package contains the database, recalculation and API tests. Unit
tests for the pure scoring core live in station_directory/tests/.

Test Files:
- conftest.py: Pytest fixtures and configuration
- test_database.py: Schema migration, CRUD, lookup, tier queries
- test_recalculation.py: Score persistence, hiding, interactions, feedback
- test_api.py: API endpoints, rate limits, admin auth, tier browsing
- test_scheduler.py: Background job setup
- test_cli.py: Command-line commands
- test_settings.py: Settings loading, logging setup, auth helpers

Running Tests:
    # Run all tests
    pytest

    # Run specific test file
    pytest tests/test_api.py

    # Run specific test class
    pytest tests/test_api.py::TestFeedbackAPI

    # Run only unit tests
    pytest -m unit

    # With coverage
    pytest --cov=station_directory --cov-report=html
"""
