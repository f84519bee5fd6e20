"""
Test suite for the Frozen Goods Ordering API.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_product_service.py -v
"""
