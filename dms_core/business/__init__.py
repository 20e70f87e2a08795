# dms_core/business/__init__.py
"""
Derived-value helpers: phone numbers, document codes, GST and stock levels.
"""
