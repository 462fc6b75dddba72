"""
Unit tests for the Station Directory scoring core

This package contains unit tests for the pure components:
- test_quality.py: Feedback aggregation, metadata richness, quality score
- test_tiers.py: Tier classification and visibility rules
- test_rate_limit.py: Rate-limit store and public station IDs
"""
